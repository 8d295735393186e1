import logging
import os
from typing import List

import pandas as pd

from src.harmonic_analysis.timeframe import timeframe_milliseconds
from src.harmonic_analysis.types import Candle

logger = logging.getLogger(__name__)

FORMAT_A_COLUMNS = ['date', 'time', 'open', 'high', 'low', 'close', 'volume']
OHLCV_COLUMNS = ['open', 'high', 'low', 'close', 'volume']


def detect_format(filepath: str) -> str:
    """
    Detects the format of the CSV file.

    Args:
        filepath: Path to the CSV file.

    Returns:
        "format_a" for semicolon-separated historical data
        (DD/MM/YYYY;HH:MM:SS;Open;High;Low;Close;Volume, no header).
        "format_b" for comma-separated data with a `time` epoch-seconds column.

    Raises:
        FileNotFoundError, ValueError.
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, 'r') as f:
        lines = [line.strip() for line in (f.readline() for _ in range(10)) if line.strip()]

    if not lines:
        raise ValueError("File is empty")
    first_line = lines[0]

    if ';' in first_line:
        return "format_a"

    if ',' in first_line:
        lowered = first_line.lower()
        if "time" in lowered and "open" in lowered:
            return "format_b"
        # Headerless epoch-seconds rows
        if first_line.split(',')[0].replace('.', '', 1).isdigit():
            return "format_b"

    raise ValueError(
        "Could not detect CSV format. Expected semicolon-separated historical "
        "format or comma-separated format with a time column."
    )


def _read_format_a(filepath: str) -> pd.DataFrame:
    df = pd.read_csv(
        filepath,
        sep=';',
        header=None,
        names=FORMAT_A_COLUMNS,
        dtype={
            'date': str, 'time': str,
            'open': 'float64', 'high': 'float64', 'low': 'float64', 'close': 'float64',
            'volume': 'float64',
        },
        engine='c',
    )
    df['timestamp'] = pd.to_datetime(df['date'] + ' ' + df['time'], format='%d/%m/%Y %H:%M:%S', utc=True)
    return df.drop(columns=['date', 'time'])


def _read_format_b(filepath: str) -> pd.DataFrame:
    with open(filepath, 'r') as f:
        has_header = not f.readline().split(',')[0].strip().replace('.', '', 1).isdigit()

    if has_header:
        df = pd.read_csv(filepath, sep=',', engine='c')
        df.columns = df.columns.str.strip().str.lower()
    else:
        df = pd.read_csv(filepath, sep=',', header=None, engine='c')
        df.columns = ['time'] + OHLCV_COLUMNS[:len(df.columns) - 1]

    required = {'time', 'open', 'high', 'low', 'close'}
    if not required.issubset(df.columns):
        raise ValueError(f"Missing required columns. Found: {df.columns.tolist()}")

    if 'volume' not in df.columns:
        df['volume'] = 0.0
    df['volume'] = df['volume'].fillna(0).astype('float64')
    for c in ['open', 'high', 'low', 'close']:
        df[c] = df[c].astype('float64')

    df['timestamp'] = pd.to_datetime(df['time'], unit='s', utc=True)
    return df.drop(columns=['time'])


def load_ohlc(filepath: str) -> pd.DataFrame:
    """
    Load OHLC data from a CSV file into a standardized DataFrame.

    Rows are sorted by time. Duplicate timestamps keep the last occurrence,
    and rows violating low <= open, close <= high (or with negative volume)
    are dropped.

    Args:
        filepath: Path to the CSV file.

    Returns:
        DataFrame indexed by UTC `timestamp` with columns
        open, high, low, close, volume.

    Raises:
        FileNotFoundError, ValueError.
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"File not found: {filepath}")
    if os.path.getsize(filepath) == 0:
        raise ValueError("File is empty")

    fmt = detect_format(filepath)
    try:
        df = _read_format_a(filepath) if fmt == "format_a" else _read_format_b(filepath)
    except (KeyError, TypeError, pd.errors.ParserError) as e:
        raise ValueError(f"Error parsing file: {e}")

    df = df[['timestamp'] + OHLCV_COLUMNS].set_index('timestamp').sort_index()

    duplicates = df.index.duplicated(keep='last')
    if duplicates.any():
        logger.debug(
            f"Duplicate timestamps in {os.path.basename(filepath)}: "
            f"{duplicates.sum()} removed (kept last occurrence)"
        )
        df = df[~duplicates]

    valid = (
        (df['low'] <= df['open']) & (df['open'] <= df['high']) &
        (df['low'] <= df['close']) & (df['close'] <= df['high']) &
        (df['volume'] >= 0)
    )
    if not valid.all():
        logger.warning(
            f"Dropping {(~valid).sum()} invalid OHLC rows from {os.path.basename(filepath)}"
        )
        df = df[valid]

    return df


def dataframe_to_candles(df: pd.DataFrame, symbol: str, timeframe: str) -> List[Candle]:
    """
    Convert a load_ohlc() frame into Candles for one (symbol, timeframe).

    Open time comes from the index; close time is the last millisecond of
    the candle's timeframe.

    Example:
        >>> df = load_ohlc("BTCUSDT_4h.csv")
        >>> candles = dataframe_to_candles(df, "BTCUSDT", "4h")
    """
    duration = timeframe_milliseconds(timeframe)
    epoch = pd.Timestamp(0, tz="UTC")
    open_times = ((df.index - epoch) // pd.Timedelta(milliseconds=1)).tolist()
    candles = []
    for open_time, row in zip(open_times, df.itertuples(index=False)):
        candles.append(Candle(
            symbol=symbol,
            timeframe=timeframe,
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
            open_time=int(open_time),
            close_time=int(open_time) + duration - 1,
        ))
    return candles
