class RetainerError(Exception):
    """Base class for mutation-service failures."""


class NotFound(RetainerError):
    """The admin token, slug or log id does not resolve."""


class InvalidState(RetainerError):
    """The client's status does not allow this change."""


class ValidationFailed(RetainerError):
    """The input is malformed, e.g. non-positive hours."""
