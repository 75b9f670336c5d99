"""Exception types raised by the drafting core.

Every error here is a deterministic consequence of registry state, so none
of them is retryable. Persistence errors raised while saving a draft (for
example ``IntegrityError`` on the unique approved_version_id column) are
never wrapped and reach the caller unchanged.
"""


class DraftError(Exception):
    """Base class for all drafting errors."""
    pass


class ConfigurationError(DraftError):
    """Raised when draftability is misconfigured.

    Examples: registering a type twice, naming an association that does not
    exist, an empty explicit association subset, or cloning through an
    association whose target type is no longer registered.
    """
    pass


class DraftLookupError(DraftError, LookupError):
    """Raised when a configuration is requested for an unregistered type."""
    pass
