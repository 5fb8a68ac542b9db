"""lnrelay: real-time Lightning invoice settlement relay."""

__version__ = "0.1.0"
