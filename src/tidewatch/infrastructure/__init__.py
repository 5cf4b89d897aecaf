"""Infrastructure layer: providers, cache, analysis and wiring."""
