"""Failure kinds produced while talking to the payment processor.

These are carried inside `Err` values up to the HTTP boundary; callers only
ever see a generic failure message.
"""


class RelayError(Exception):
    """Base class for relay failures."""

    code = "RELAY_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthConfigError(RelayError):
    """Client id or secret is not configured."""

    code = "AUTH_CONFIG_ERROR"


class AuthExchangeError(RelayError):
    """The client-credentials exchange was rejected or returned garbage."""

    code = "AUTH_EXCHANGE_ERROR"


class UpstreamOrderError(RelayError):
    """An order call failed or its response was missing expected fields."""

    code = "UPSTREAM_ORDER_ERROR"
