"""Rules engine for a hex-tile settlement trading game."""

__version__ = "0.1.0"
