"""gamescript: extract, translate and reinject text in game script files."""

__version__ = "0.1.0"
