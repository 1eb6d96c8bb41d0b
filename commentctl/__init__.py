"""commentctl: manage comment records from the command line."""

__version__ = "0.1.0"
