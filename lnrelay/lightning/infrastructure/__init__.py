"""Infrastructure adapters for the Lightning integration."""
