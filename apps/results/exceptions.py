class ResultError(Exception):
    """
    Base error of the result pipeline.

    Carries an HTTP-style status next to the message so the web layer can
    answer with {"status": ..., "message": ...} without knowing the cause.
    """

    status = 400

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

    def as_dict(self):
        return {"status": self.status, "message": self.message}


class InvalidInput(ResultError):
    status = 400


class NotFound(ResultError):
    status = 404


class Forbidden(ResultError):
    status = 403


class InvalidState(ResultError):
    status = 400


class ConfigurationError(ResultError):
    """Grade scale (or other setup) cannot serve the request."""

    status = 500
