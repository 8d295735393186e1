"""Candle timeframes and their durations."""

from enum import Enum
from typing import Union


class Timeframe(str, Enum):
    ONE_MINUTE = "1m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1h"
    FOUR_HOURS = "4h"
    ONE_DAY = "1d"
    ONE_WEEK = "1w"


TIMEFRAME_MILLISECONDS = {
    Timeframe.ONE_MINUTE: 60 * 1000,
    Timeframe.FIVE_MINUTES: 5 * 60 * 1000,
    Timeframe.FIFTEEN_MINUTES: 15 * 60 * 1000,
    Timeframe.THIRTY_MINUTES: 30 * 60 * 1000,
    Timeframe.ONE_HOUR: 60 * 60 * 1000,
    Timeframe.FOUR_HOURS: 4 * 60 * 60 * 1000,
    Timeframe.ONE_DAY: 24 * 60 * 60 * 1000,
    Timeframe.ONE_WEEK: 7 * 24 * 60 * 60 * 1000,
}


def parse_timeframe(value: Union[str, Timeframe]) -> Timeframe:
    """
    Normalize a timeframe string such as "4h" or "1D".

    Raises:
        ValueError: If the value is not a supported timeframe.
    """
    if isinstance(value, Timeframe):
        return value
    normalized = value.strip()
    # "1M" is ambiguous elsewhere; here upper-case units other than M are accepted
    if normalized[-1:] in ("H", "D", "W"):
        normalized = normalized[:-1] + normalized[-1].lower()
    try:
        return Timeframe(normalized)
    except ValueError:
        valid = ", ".join(tf.value for tf in Timeframe)
        raise ValueError(f"Invalid timeframe: {value}. Must be one of: {valid}.")


def timeframe_milliseconds(value: Union[str, Timeframe]) -> int:
    """Duration of one candle of the given timeframe, in milliseconds."""
    return TIMEFRAME_MILLISECONDS[parse_timeframe(value)]
