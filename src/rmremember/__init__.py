"""Desktop-side access to a reMarkable tablet over SSH and USB."""

__version__ = "0.1.0"
