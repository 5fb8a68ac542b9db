"""Application layer for the Lightning integration."""
