"""HTTP service for the Flayer core."""
