"""command-filter - run verbose shell commands, log their output, return a summary."""

__version__ = "0.1.0"
