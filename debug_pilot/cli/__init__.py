"""Command line interface for Debug Pilot."""
