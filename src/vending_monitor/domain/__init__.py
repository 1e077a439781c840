"""Domain layer: stock events and the machine entity.

Events are immutable value objects; ``Machine`` is the only mutable
record and is written exclusively by the stock tracker.
"""
