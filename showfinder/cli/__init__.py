"""Command-line tools for Showfinder."""
