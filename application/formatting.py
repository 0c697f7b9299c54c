ZERO_DECIMAL_CURRENCIES = frozenset({'IDR', 'JPY', 'KRW', 'VND'})


def rate_fraction_digits(currency: str) -> int:
    return 0 if str(currency).upper() in ZERO_DECIMAL_CURRENCIES else 2


def format_rate(value: float | None, currency: str) -> str:
    """Thousands-separated amount with the currency's usual number of decimals."""
    if value is None:
        return '-'
    try:
        number = float(value)
    except (TypeError, ValueError):
        return '-'
    if number != number:
        return '-'
    return f'{number:,.{rate_fraction_digits(currency)}f}'
