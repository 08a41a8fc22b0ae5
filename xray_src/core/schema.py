from enum import Enum
from typing import Optional

import pandera.pandas as pa
from pandera.api.pandas.model_config import BaseConfig
from pandera.typing import Series


class Column(str, Enum):
    ISIN = "ISIN"
    NAME = "Name"
    TICKER = "Ticker"
    TER = "TER"
    HOLDING = "Holding"
    HOLDING_WEIGHT = "HoldingWeight"
    SECTOR = "Sector"
    SECTOR_WEIGHT = "SectorWeight"
    COUNTRY = "Country"
    COUNTRY_WEIGHT = "CountryWeight"
    REGION = "Region"
    REGION_WEIGHT = "RegionWeight"

    AMOUNT = "Amount"
    WEIGHT = "Weight"


class SecuritiesSchema(pa.DataFrameModel):
    """
    Securities definition table. Cells stay strings here; numbers are parsed
    by the merger so it can name the offending row and field.
    """

    ISIN: Series[str] = pa.Field(nullable=True)
    Name: Series[str] = pa.Field(nullable=True)
    Ticker: Optional[Series[str]] = pa.Field(nullable=True)
    TER: Series[str] = pa.Field(nullable=True)
    Holding: Series[str] = pa.Field(nullable=True)
    HoldingWeight: Series[str] = pa.Field(nullable=True)
    Sector: Series[str] = pa.Field(nullable=True)
    SectorWeight: Series[str] = pa.Field(nullable=True)
    Country: Series[str] = pa.Field(nullable=True)
    CountryWeight: Series[str] = pa.Field(nullable=True)
    Region: Series[str] = pa.Field(nullable=True)
    RegionWeight: Series[str] = pa.Field(nullable=True)

    class Config(BaseConfig):
        strict = False
        coerce = True


class AmountPortfolioSchema(pa.DataFrameModel):
    ISIN: Series[str] = pa.Field(nullable=False, str_length={"min_value": 1})
    Amount: Series[float] = pa.Field(nullable=False)

    class Config(BaseConfig):
        strict = "filter"
        coerce = True


class WeightPortfolioSchema(pa.DataFrameModel):
    ISIN: Series[str] = pa.Field(nullable=False, str_length={"min_value": 1})
    Weight: Series[float] = pa.Field(nullable=False)

    class Config(BaseConfig):
        strict = "filter"
        coerce = True
