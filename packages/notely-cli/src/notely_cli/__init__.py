"""notely: terminal client for the Notely note editor backend."""

__version__ = "0.1.0"
