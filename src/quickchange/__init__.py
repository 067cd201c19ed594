"""quickchange - cargo config editor and rustup mirror switcher."""

__version__ = "0.4.0"
