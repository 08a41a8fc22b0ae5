"""
Security models.

RawRow is one line of the securities CSV, kept as raw strings so the merger
can report exactly which cell is malformed. Security is the canonical,
merged record for one ISIN.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Dimension(str, Enum):
    """Classification dimensions, in presentation order."""

    HOLDING = "Holding"
    SECTOR = "Sector"
    COUNTRY = "Country"
    REGION = "Region"
    MARKET = "Market"

    def __str__(self) -> str:
        return self.value


# Dimensions stored on a Security; MARKET is always derived from COUNTRY
STORED_DIMENSIONS = (
    Dimension.HOLDING,
    Dimension.SECTOR,
    Dimension.COUNTRY,
    Dimension.REGION,
)

Breakdown = Dict[str, float]


class RawRow(BaseModel):
    """
    One line of the securities table.

    Attributes:
        row_index: 1-based data line number, used in error messages
        isin: Blank on continuation rows
        holding: Leaf holding label or the ISIN of another security
        *_weight: Percentages (0-100) as written in the file
    """

    row_index: int
    isin: Optional[str] = None
    name: Optional[str] = None
    ticker: Optional[str] = None
    ter: Optional[str] = None
    holding: Optional[str] = None
    holding_weight: Optional[str] = None
    sector: Optional[str] = None
    sector_weight: Optional[str] = None
    country: Optional[str] = None
    country_weight: Optional[str] = None
    region: Optional[str] = None
    region_weight: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    def pair(self, dimension: Dimension) -> tuple[Optional[str], Optional[str]]:
        """Return the (category, weight) cells for a stored dimension."""
        if dimension == Dimension.HOLDING:
            return self.holding, self.holding_weight
        if dimension == Dimension.SECTOR:
            return self.sector, self.sector_weight
        if dimension == Dimension.COUNTRY:
            return self.country, self.country_weight
        if dimension == Dimension.REGION:
            return self.region, self.region_weight
        raise ValueError(f"{dimension} is not read from the securities table")


class Security(BaseModel):
    """
    Canonical record for one ISIN.

    Breakdown weights are fractions (0..1) of the security itself. They need
    not sum to 1; the remainder is treated as unclassified.
    """

    model_config = ConfigDict(frozen=True)

    isin: str = Field(..., min_length=1)
    name: str = ""
    ticker: Optional[str] = None
    ter: float = Field(default=0.0, ge=0)
    holdings: Breakdown = Field(default_factory=dict)
    sectors: Breakdown = Field(default_factory=dict)
    countries: Breakdown = Field(default_factory=dict)
    regions: Breakdown = Field(default_factory=dict)

    @field_validator("holdings", "sectors", "countries", "regions")
    @classmethod
    def non_negative_weights(cls, v: Breakdown) -> Breakdown:
        for category, weight in v.items():
            if weight < 0:
                raise ValueError(f"negative weight {weight} for '{category}'")
        return v

    @property
    def label(self) -> str:
        """Display name, falling back to the ISIN."""
        return self.name or self.isin

    def breakdown(self, dimension: Dimension) -> Breakdown:
        if dimension == Dimension.HOLDING:
            return self.holdings
        if dimension == Dimension.SECTOR:
            return self.sectors
        if dimension == Dimension.COUNTRY:
            return self.countries
        if dimension == Dimension.REGION:
            return self.regions
        raise ValueError(f"{dimension} is derived, not stored on a security")
