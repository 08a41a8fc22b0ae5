"""
CSV ingestion for the securities and portfolio tables.

Only shape is checked here (header, ISIN presence, numeric portfolio values).
Everything about meaning (continuation rows, weights, duplicates) belongs to
the services.
"""

import math
from pathlib import Path
from typing import List, Tuple, Union

import pandas as pd
from pandera.errors import SchemaError, SchemaErrors

from xray_src.core.errors import MalformedRow, TableFormatError
from xray_src.core.schema import (
    AmountPortfolioSchema,
    Column,
    SecuritiesSchema,
    WeightPortfolioSchema,
)
from xray_src.models import PortfolioEntry, PortfolioMode, RawRow
from xray_src.xray_utils.isin_validator import normalize_isin
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def _read_csv(path: PathLike, **kwargs) -> pd.DataFrame:
    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            **kwargs,
        )
    except FileNotFoundError:
        raise TableFormatError(str(path), "file not found")
    except pd.errors.EmptyDataError:
        raise TableFormatError(str(path), "file is empty")
    except pd.errors.ParserError as e:
        raise TableFormatError(str(path), f"could not parse CSV: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    return df


def securities_rows_from_dataframe(
    df: pd.DataFrame, source: str = "<dataframe>"
) -> List[RawRow]:
    """
    Convert a securities DataFrame into RawRows.

    Args:
        df: Table with the securities header, every cell a string
        source: Name used in error messages

    Returns:
        RawRows in file order, row_index starting at 1
    """
    try:
        validated = SecuritiesSchema.validate(df)
    except (SchemaError, SchemaErrors) as e:
        raise TableFormatError(source, f"invalid securities header: {e}")

    has_ticker = Column.TICKER.value in validated.columns
    rows = []
    for position, (_, record) in enumerate(validated.iterrows(), start=1):
        rows.append(
            RawRow(
                row_index=position,
                isin=record[Column.ISIN.value],
                name=record[Column.NAME.value],
                ticker=record[Column.TICKER.value] if has_ticker else None,
                ter=record[Column.TER.value],
                holding=record[Column.HOLDING.value],
                holding_weight=record[Column.HOLDING_WEIGHT.value],
                sector=record[Column.SECTOR.value],
                sector_weight=record[Column.SECTOR_WEIGHT.value],
                country=record[Column.COUNTRY.value],
                country_weight=record[Column.COUNTRY_WEIGHT.value],
                region=record[Column.REGION.value],
                region_weight=record[Column.REGION_WEIGHT.value],
            )
        )
    return rows


def read_securities(path: PathLike) -> List[RawRow]:
    """Read the securities definition CSV."""
    df = _read_csv(path)
    rows = securities_rows_from_dataframe(df, source=str(path))
    logger.info(f"Read {len(rows)} security rows from {Path(path).name}")
    return rows


def detect_portfolio_mode(columns: List[str], source: str = "<dataframe>") -> PortfolioMode:
    has_weight = Column.WEIGHT.value in columns
    has_amount = Column.AMOUNT.value in columns
    if has_weight and has_amount:
        raise TableFormatError(
            source, "portfolio header has both Amount and Weight; use one"
        )
    if has_weight:
        logger.debug("Portfolio given as weights")
        return PortfolioMode.WEIGHT
    if has_amount:
        logger.debug("Portfolio given as amounts")
        return PortfolioMode.AMOUNT
    raise TableFormatError(
        source, f"portfolio header {columns} needs ISIN and Amount or Weight"
    )


def portfolio_entries_from_dataframe(
    df: pd.DataFrame, source: str = "<dataframe>"
) -> Tuple[PortfolioMode, List[PortfolioEntry]]:
    """
    Convert a portfolio DataFrame into typed entries.

    Returns:
        Tuple of (mode, entries)
    """
    if Column.ISIN.value not in df.columns:
        raise TableFormatError(source, "portfolio header has no ISIN column")
    mode = detect_portfolio_mode(list(df.columns), source)
    value_col = Column.WEIGHT.value if mode == PortfolioMode.WEIGHT else Column.AMOUNT.value

    isins: List[str] = []
    values: List[float] = []
    for position, (_, record) in enumerate(df.iterrows(), start=1):
        isin = normalize_isin(record[Column.ISIN.value])
        if not isin:
            raise MalformedRow(position, Column.ISIN.value, "missing ISIN")

        raw = str(record[value_col]).strip()
        value = pd.to_numeric(raw, errors="coerce")
        if raw == "" or pd.isna(value) or not math.isfinite(value):
            raise MalformedRow(
                position, value_col, f"'{raw}' is not a finite number", isin=isin
            )
        isins.append(isin)
        values.append(float(value))

    typed = pd.DataFrame({Column.ISIN.value: isins, value_col: values})
    schema = WeightPortfolioSchema if mode == PortfolioMode.WEIGHT else AmountPortfolioSchema
    try:
        typed = schema.validate(typed)
    except (SchemaError, SchemaErrors) as e:
        raise TableFormatError(source, f"invalid portfolio table: {e}")

    entries = [
        PortfolioEntry(isin=isin, value=value, row_index=position)
        for position, (isin, value) in enumerate(
            zip(typed[Column.ISIN.value], typed[value_col]), start=1
        )
    ]
    return mode, entries


def read_portfolio(path: PathLike) -> Tuple[PortfolioMode, List[PortfolioEntry]]:
    """Read the portfolio CSV (`ISIN,Amount` or `ISIN,Weight`, '#' comments allowed)."""
    df = _read_csv(path, comment="#")
    mode, entries = portfolio_entries_from_dataframe(df, source=str(path))
    logger.info(
        f"Read {len(entries)} portfolio rows ({mode.value} mode) from {Path(path).name}"
    )
    return mode, entries
