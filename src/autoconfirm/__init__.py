"""Gmail-driven auto-confirmation of Netflix household verification emails."""

__version__ = "0.1.0"
