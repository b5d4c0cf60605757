"""Loaders for composite signals stored on disk."""

from .signals import load_signal, SignalFormatError, SUPPORTED_SUFFIXES

__all__ = [
    "load_signal",
    "SignalFormatError",
    "SUPPORTED_SUFFIXES",
]
