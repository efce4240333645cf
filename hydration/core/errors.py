"""
Exception types for the hydration engine.
"""


class InvalidTransitionError(Exception):
    """Raised when a Resource transition is illegal or a message has no handler."""
    pass


class RedirectLoopError(Exception):
    """Raised when a planning pass keeps redirecting without settling."""
    pass


class RouteError(Exception):
    """Raised when a route cannot be formatted to a canonical URL."""
    pass
