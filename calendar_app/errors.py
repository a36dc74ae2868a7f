"""
Service errors raised by holiday providers and the holiday service.
Routers translate them into HTTP status codes.
"""


class HolidayServiceError(Exception):
    """Base class for holiday lookup failures."""


class ProviderNotConfiguredError(HolidayServiceError):
    """The upstream provider has no usable API key."""


class UpstreamError(HolidayServiceError):
    """The upstream provider answered with an error or an unexpected payload."""
