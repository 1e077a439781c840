"""Vending-machine stock monitoring on a synchronous publish/subscribe bus."""

__version__ = "0.1.0"
