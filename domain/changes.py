from collections.abc import Sequence

from domain.models import ChangeKind, ChangeResult, RatePoint

NO_CHANGE = ChangeResult(delta=0.0, kind=ChangeKind.NEUTRAL)


def classify(delta: float) -> ChangeKind:
    if delta > 0:
        return ChangeKind.POSITIVE
    if delta < 0:
        return ChangeKind.NEGATIVE
    return ChangeKind.NEUTRAL


def current_change(series: Sequence[RatePoint], current_value: float) -> ChangeResult:
    """
    Change against the most recent point whose value differs from current_value.

    Equal trailing samples are skipped so that two identical readings in a
    row do not hide a move that happened just before them.
    """
    if len(series) < 2:
        return NO_CHANGE

    for point in reversed(series):
        if point.value != current_value:
            delta = current_value - point.value
            return ChangeResult(delta=delta, kind=classify(delta))

    return NO_CHANGE


def window_change(series: Sequence[RatePoint], current_value: float) -> ChangeResult:
    """Change over the visible window, measured from its first differing value."""
    if not series:
        return NO_CHANGE

    comparison = next(
        (point.value for point in series if point.value != current_value),
        series[0].value,
    )
    delta = current_value - comparison
    return ChangeResult(delta=delta, kind=classify(delta))
