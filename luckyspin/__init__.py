"""Daily prize wheel for restaurants."""

__version__ = "0.1.0"
