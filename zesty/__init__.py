"""Zoo facility incident management staff client."""

__version__ = "0.4.0"
