"""BentaCars buyer qualification: Taglish slot-filling dialogue engine."""

__version__ = "0.1.0"
