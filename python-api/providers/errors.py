"""Error taxonomy shared by the flights and hotels proxies."""


class ProxyError(Exception):
    """Base class for failures reported to the caller inside the envelope."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(ProxyError):
    status_code = 500


class SearchValidationError(ProxyError):
    status_code = 400


class UpstreamAuthError(ProxyError):
    status_code = 500


class UpstreamRateLimited(ProxyError):
    status_code = 500


class UpstreamUnavailable(ProxyError):
    status_code = 500


class UpstreamTimeout(ProxyError):
    status_code = 408


class UnknownUpstreamError(ProxyError):
    status_code = 500
