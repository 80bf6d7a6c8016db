class ViewerError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ViewerError):
    """Missing fields, reserved names, disallowed statements or identifiers."""

    status_code = 400


class NotFoundError(ViewerError):
    status_code = 404


class ConnectionTestError(ViewerError):
    """A new or updated data source failed its live connection test."""

    status_code = 400


class DatabaseError(ViewerError):
    """Any fault raised by the driver while executing a statement."""

    status_code = 500
