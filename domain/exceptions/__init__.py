from .rates import (
    InvalidCurrencyError,
    MalformedSeriesError,
    NoActivePairError,
    ProviderError,
    RatesException,
    RatesTransportError,
    UpstreamHTTPError,
)

__all__ = [
    'InvalidCurrencyError',
    'MalformedSeriesError',
    'NoActivePairError',
    'ProviderError',
    'RatesException',
    'RatesTransportError',
    'UpstreamHTTPError',
]
