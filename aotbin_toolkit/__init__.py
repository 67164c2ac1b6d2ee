"""AoT BIN Toolkit - Extract, build and update Attack on Titan BIN archives."""

__version__ = "0.1.0"
