"""Debug Pilot - configure PHP debugging extensions from the command line."""

__version__ = "0.1.0"
