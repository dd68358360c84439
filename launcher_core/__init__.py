"""Core library for game launchers: versions, downloads, installs, integrity checks and patches."""

__version__ = "1.0.0"

__all__ = ["installer", "prettify", "repairer", "star_rail", "traits", "version"]