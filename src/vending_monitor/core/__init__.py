"""Shared primitives: configuration, enums, errors and id factories."""
