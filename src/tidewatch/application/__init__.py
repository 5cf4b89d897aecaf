"""Application layer."""

from tidewatch.application.acquisition import AcquisitionCoordinator

__all__ = ["AcquisitionCoordinator"]
