"""Command-line interface for cadence (``cadence`` console script)."""
