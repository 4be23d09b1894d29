"""Error taxonomy shared by the parser, request model, proxy and controller."""


class PlaygroundError(Exception):
    """Base class for every error raised by api-playground."""


class ParseError(PlaygroundError):
    """A curl command could not be parsed. Nothing is partially applied."""


class ValidationError(PlaygroundError):
    """Request state is incomplete or invalid and cannot be executed."""


class TransportError(PlaygroundError):
    """The upstream could not be reached (DNS, connection, timeout)."""
