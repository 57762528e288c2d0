"""Version information for stackex."""

__version__ = "0.3.0"
