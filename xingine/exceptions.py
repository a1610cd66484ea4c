"""
Engine Exceptions

Raised only by internal helpers and converted to failure results at the
handler boundary. Handlers never let these escape to the engine.
"""


class CapabilityMissingError(Exception):
    """Raised when a host collaborator lacks a method an action needs."""
    pass
