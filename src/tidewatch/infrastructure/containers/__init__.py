"""Dependency injection containers."""

from tidewatch.infrastructure.containers.container import Container, get_container

__all__ = ["Container", "get_container"]
