from typing import Any


class RatesException(Exception):
    pass


class InvalidCurrencyError(RatesException):
    pass


class ProviderError(RatesException):
    pass


class UpstreamHTTPError(ProviderError):
    """Non-2xx answer from the rates API, with the parsed body attached."""

    def __init__(self, status_code: int, body: Any, endpoint: str):
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        super().__init__(f"Rates API HTTP error {status_code} on {endpoint}: {str(body)[:200]}")


class RatesTransportError(ProviderError):
    pass


class MalformedSeriesError(RatesException):
    pass


class NoActivePairError(RatesException):
    pass
