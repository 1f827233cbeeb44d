"""Rules engine for a Carcassonne-like tile placement game."""

__version__ = "0.2.0"
