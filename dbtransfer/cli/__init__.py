"""Command line interface for dbtransfer."""
