"""In-process infrastructure: the event bus and the machine repository."""
