"""Registry clients."""
