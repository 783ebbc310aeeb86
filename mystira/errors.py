"""
Exception types raised by the session engine and scenario services.

The HTTP layer maps these onto status codes; the services themselves never
deal in status codes.
"""


class MystiraError(Exception):
    """Base class for all engine errors"""


class NotFoundError(MystiraError):
    """A scenario, session or scene does not exist"""


class ValidationError(MystiraError):
    """Input is malformed or violates a domain rule"""


class ScenarioValidationError(ValidationError):
    """A scenario document is structurally inconsistent"""


class InvalidStateError(MystiraError):
    """The session's status does not allow the requested operation"""


class ConcurrencyError(MystiraError):
    """A session was modified by another writer since it was read"""
