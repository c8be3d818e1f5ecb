"""deepwork - track deep work sessions from the command line."""

__version__ = "0.1.0"
