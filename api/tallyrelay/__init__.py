"""Relay Tally form submissions to email."""

__version__ = "0.1.0"
