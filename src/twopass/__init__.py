"""twopass - two-pass HandBrakeCLI command compiler."""

__version__ = "0.1.0"
