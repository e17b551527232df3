"""UDP broadcast discovery mesh in which nodes share their platform information."""

__version__ = "1.0.1"