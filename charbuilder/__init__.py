"""Character Builder - rules resolution for 5th edition characters."""

__version__ = "0.1.0"
