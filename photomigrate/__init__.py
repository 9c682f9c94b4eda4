"""Schema migrations for a MySQL photo library database, with a command to run them."""

__version__ = "0.1.0"