from __future__ import annotations


class SwarmError(Exception):
    """Base class for swarm failures."""


class InitializationError(SwarmError):
    """The flock has no host to bind to, or was used before binding."""


class NumericInstabilityError(SwarmError):
    """An agent update left a non-finite position behind."""
