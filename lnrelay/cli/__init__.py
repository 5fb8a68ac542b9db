"""Command line interface for lnrelay."""
