"""Health checks for a Nix install."""

__version__ = "0.4.0"
