class CraneCRMError(Exception):
    """Base class for errors raised by the service layer."""


class ValidationError(CraneCRMError):
    """
    Input could not be accepted (missing field, malformed value,
    out-of-range configuration, illegal status transition).
    Nothing has been written when this is raised.
    """

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


class NotFoundError(ValidationError):
    pass


class RemoteError(CraneCRMError):
    """
    The database call failed. The session has already been rolled back;
    the caller shows a generic message and the user resubmits.
    """

    def __init__(self, message, original=None):
        super().__init__(message)
        self.message = message
        self.original = original
