from __future__ import annotations


class HillMonitorError(Exception):
    """Base class for errors that map onto a fixed HTTP status."""

    status_code = 500
    public_message = "Internal server error"

    @property
    def message(self) -> str:
        return self.public_message


class ConfigurationError(HillMonitorError):
    """A required secret or URL is missing. Details stay in server logs."""

    status_code = 500


class AuthenticationError(HillMonitorError):
    status_code = 401
    public_message = "Unauthorized"


class InvalidRequestError(HillMonitorError):
    status_code = 400
    public_message = "Bad request"

    @property
    def message(self) -> str:
        return str(self) or self.public_message


class SignatureError(AuthenticationError):
    """Webhook signature could not be verified. Sub-kind is never disclosed."""


class MissingSignatureError(SignatureError):
    pass


class MalformedSignatureError(SignatureError):
    pass


class SignatureMismatchError(SignatureError):
    pass


def error_http_status(exc: BaseException) -> int:
    if isinstance(exc, HillMonitorError):
        return exc.status_code
    return 500
