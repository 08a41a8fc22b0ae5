"""
Country and sector classification lookups.

The table is an injected, read-only capability: services receive an instance
instead of reading module-level dictionaries, so tests can pass a small
fixture table. The bundled default lives in default_config/classification.json;
a user file given through XRAY_CLASSIFICATION_PATH is layered on top of it.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from xray_src.config import CLASSIFICATION_PATH, DEFAULT_CLASSIFICATION_PATH
from xray_src.core.errors import TableFormatError, UnknownCountry, UnknownSector
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)


class CountryClass(BaseModel):
    region: Optional[str] = None
    market: Optional[str] = None


class ClassificationFile(BaseModel):
    """On-disk layout of a classification JSON file."""

    countries: Dict[str, CountryClass] = Field(default_factory=dict)
    country_aliases: Dict[str, str] = Field(default_factory=dict)
    sectors: List[str] = Field(default_factory=list)
    sector_synonyms: Dict[str, str] = Field(default_factory=dict)


class ClassificationTable:
    """Read-only country -> region/market and sector synonym lookups."""

    def __init__(
        self,
        regions: Mapping[str, str],
        markets: Mapping[str, str],
        sectors: Iterable[str] = (),
        sector_synonyms: Optional[Mapping[str, str]] = None,
        country_aliases: Optional[Mapping[str, str]] = None,
    ):
        self._regions = dict(regions)
        self._markets = dict(markets)
        self._sectors = list(dict.fromkeys(sectors))
        self._sector_synonyms = dict(sector_synonyms or {})
        self._aliases = dict(country_aliases or {})

        self._regions_folded = {k.casefold(): v for k, v in self._regions.items()}
        self._markets_folded = {k.casefold(): v for k, v in self._markets.items()}
        self._aliases_folded = {k.casefold(): v for k, v in self._aliases.items()}
        self._sectors_folded = {s.casefold(): s for s in self._sectors}
        self._synonyms_folded = {
            k.casefold(): v for k, v in self._sector_synonyms.items()
        }

    def _lookup(
        self,
        country: str,
        table: Dict[str, str],
        folded: Dict[str, str],
    ) -> Optional[str]:
        key = country.strip()
        if key in table:
            return table[key]
        if key.casefold() in folded:
            return folded[key.casefold()]
        alias = self._aliases.get(key) or self._aliases_folded.get(key.casefold())
        if alias and alias != key:
            return table.get(alias) or folded.get(alias.casefold())
        return None

    def region_of(self, country: str, isin: str = "") -> str:
        region = self._lookup(country, self._regions, self._regions_folded)
        if region is None:
            raise UnknownCountry(country, isin, lookup="region")
        return region

    def market_of(self, country: str, isin: str = "") -> str:
        market = self._lookup(country, self._markets, self._markets_folded)
        if market is None:
            raise UnknownCountry(country, isin, lookup="market")
        return market

    @property
    def has_sector_vocabulary(self) -> bool:
        return bool(self._sectors)

    @property
    def sectors(self) -> List[str]:
        return list(self._sectors)

    def canonical_sector(
        self, sector: str, isin: str = "", row_index: Optional[int] = None
    ) -> str:
        """
        Map a sector name or synonym to its canonical name.

        Without a sector vocabulary every name passes through unchanged.
        """
        if not self._sectors:
            return sector
        key = sector.strip()
        if key in self._sectors:
            return key
        folded = key.casefold()
        if folded in self._sectors_folded:
            return self._sectors_folded[folded]
        if folded in self._synonyms_folded:
            return self._synonyms_folded[folded]
        raise UnknownSector(sector, isin, row_index)

    def to_file_model(self) -> ClassificationFile:
        countries: Dict[str, CountryClass] = {}
        for country in dict.fromkeys(list(self._regions) + list(self._markets)):
            countries[country] = CountryClass(
                region=self._regions.get(country), market=self._markets.get(country)
            )
        return ClassificationFile(
            countries=countries,
            country_aliases=self._aliases,
            sectors=self._sectors,
            sector_synonyms=self._sector_synonyms,
        )

    @classmethod
    def from_file_model(cls, data: ClassificationFile) -> "ClassificationTable":
        regions = {c: v.region for c, v in data.countries.items() if v.region}
        markets = {c: v.market for c, v in data.countries.items() if v.market}
        return cls(
            regions=regions,
            markets=markets,
            sectors=data.sectors,
            sector_synonyms=data.sector_synonyms,
            country_aliases=data.country_aliases,
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ClassificationTable":
        return cls.from_file_model(_read_classification_file(Path(path)))

    def overlay(self, other: "ClassificationTable") -> "ClassificationTable":
        """Return a new table where entries of `other` extend or replace ours."""
        mine = self.to_file_model()
        theirs = other.to_file_model()
        countries = dict(mine.countries)
        for country, cls_ in theirs.countries.items():
            base = countries.get(country, CountryClass())
            countries[country] = CountryClass(
                region=cls_.region or base.region, market=cls_.market or base.market
            )
        merged = ClassificationFile(
            countries=countries,
            country_aliases={**mine.country_aliases, **theirs.country_aliases},
            sectors=list(dict.fromkeys(mine.sectors + theirs.sectors)),
            sector_synonyms={**mine.sector_synonyms, **theirs.sector_synonyms},
        )
        return ClassificationTable.from_file_model(merged)


def _read_classification_file(path: Path) -> ClassificationFile:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise TableFormatError(str(path), "classification file not found")
    except json.JSONDecodeError as e:
        raise TableFormatError(str(path), f"invalid JSON: {e}")

    try:
        return ClassificationFile.model_validate(raw)
    except ValidationError as e:
        raise TableFormatError(str(path), f"unexpected layout: {e}")


def load_classification_table(
    path: Optional[Union[str, Path]] = None,
) -> ClassificationTable:
    """
    Load the bundled table, extended by a user file when one is configured.

    Args:
        path: Explicit override file; defaults to XRAY_CLASSIFICATION_PATH

    Returns:
        ClassificationTable
    """
    table = ClassificationTable.from_json(DEFAULT_CLASSIFICATION_PATH)
    override = Path(path) if path else CLASSIFICATION_PATH
    if override:
        logger.info(f"Extending classification table with {override}")
        table = table.overlay(ClassificationTable.from_json(override))
    return table
