from __future__ import annotations

import csv
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

import requests

from .schemas import LocationStats

logger = logging.getLogger(__name__)

DEFAULT_PROPERTY_TAX_RATE = 1.0

# Approximate effective property tax by state, annual percent of home value
PROPERTY_TAX_RATES: Dict[str, float] = {
    "AL": 0.4, "AK": 1.0, "AZ": 0.6, "AR": 0.6, "CA": 0.7, "CO": 0.5,
    "CT": 1.7, "DE": 0.5, "FL": 0.9, "GA": 0.9, "HI": 0.3, "ID": 0.7,
    "IL": 1.7, "IN": 0.8, "IA": 1.3, "KS": 1.3, "KY": 0.8, "LA": 0.5,
    "ME": 1.1, "MD": 1.0, "MA": 1.1, "MI": 1.4, "MN": 1.1, "MS": 0.6,
    "MO": 0.9, "MT": 0.8, "NE": 1.6, "NV": 0.6, "NH": 1.9, "NJ": 2.0,
    "NM": 0.6, "NY": 1.2, "NC": 0.8, "ND": 0.9, "OH": 1.4, "OK": 0.8,
    "OR": 0.9, "PA": 1.4, "RI": 1.4, "SC": 0.5, "SD": 1.2, "TN": 0.7,
    "TX": 1.6, "UT": 0.6, "VT": 1.8, "VA": 0.8, "WA": 0.9, "WV": 0.5,
    "WI": 1.7, "WY": 0.6, "DC": 0.5,
}

GROWTH_WINDOW_YEARS = 5
GROWTH_WINDOW_MONTHS = GROWTH_WINDOW_YEARS * 12

_ZIP_PATTERN = re.compile(r"\b\d{5}\b")
_DATE_COLUMN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def property_tax_rate_for(state: Optional[str]) -> float:
    return PROPERTY_TAX_RATES.get((state or "").upper(), DEFAULT_PROPERTY_TAX_RATE)


def detect_zip_code(message: str) -> Optional[str]:
    """Return the first standalone 5-digit token in free text."""
    match = _ZIP_PATTERN.search(message)
    return match.group(0) if match else None


def annual_growth_rate(
    old_value: Optional[float], new_value: Optional[float], years: float
) -> Optional[float]:
    """Compound annual growth in percent, rounded to two decimals."""
    if not old_value or not new_value or old_value <= 0 or new_value <= 0:
        return None
    rate = ((new_value / old_value) ** (1 / years) - 1) * 100
    return round(rate, 2)


class ZipCodeTable:
    """ZIP-level home value / rent table exported from Zillow ZHVI and ZORI."""

    def __init__(self, records: Dict[str, Dict[str, object]]) -> None:
        self.records = records

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ZipCodeTable":
        with open(path, encoding="utf-8") as handle:
            records = json.load(handle)
        logger.info("Loaded %d ZIP codes from %s", len(records), path)
        return cls(records)

    @classmethod
    def from_zillow_csvs(
        cls, home_csv: Union[str, Path], rent_csv: Union[str, Path]
    ) -> "ZipCodeTable":
        """
        Build the table from Zillow's ZIP-level ZHVI (home value) and ZORI
        (rent) CSVs, one column per month.
        """
        records = _read_zillow_csv(home_csv, "homeValue")
        for zip_code, row in _read_zillow_csv(rent_csv, "rentValue").items():
            merged = records.setdefault(
                zip_code, {"state": row["state"], "city": row["city"]}
            )
            merged["rentValue"] = row["rentValue"]
            merged["rentValueGrowthRate"] = row["rentValueGrowthRate"]
        logger.info("Merged %d ZIP codes from %s and %s", len(records), home_csv, rent_csv)
        return cls(records)

    def save(self, path: Union[str, Path]) -> None:
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(self.records, handle, indent=2)

    def __contains__(self, zip_code: str) -> bool:
        return zip_code in self.records

    def __len__(self) -> int:
        return len(self.records)

    def lookup(self, zip_code: str) -> Optional[LocationStats]:
        row = self.records.get(zip_code)
        if row is None:
            return None

        state = str(row.get("state") or "")
        return LocationStats(
            zip_code=zip_code,
            city=str(row.get("city") or ""),
            state=state,
            median_home_price=_to_float(row.get("homeValue")) or 0.0,
            average_rent=_to_float(row.get("rentValue")) or 0.0,
            property_tax_rate=property_tax_rate_for(state),
            home_appreciation_rate=_to_float(row.get("homeValueGrowthRate")),
            rent_growth_rate=_to_float(row.get("rentValueGrowthRate")),
        )


class CensusACSClient:
    """Thin wrapper around the Census API for ZIP-level (ZCTA) ACS pulls."""

    BASE_URL = "https://api.census.gov/data"
    GEO_KEY = "zip code tabulation area"

    ACS_METRICS: Dict[str, str] = {
        "median_home_value": "B25077_001E",
        "median_rent": "B25064_001E",
    }

    def __init__(
        self,
        api_key: Optional[str],
        dataset: str = "acs/acs5",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.dataset = dataset
        self.session = session or requests.Session()

    def fetch_housing_metrics(
        self, zip_code: str, *, year: int = 2023
    ) -> Dict[str, Optional[float]]:
        columns = ["NAME"] + sorted(self.ACS_METRICS.values())
        params = {
            "get": ",".join(columns),
            "for": f"{self.GEO_KEY}:{zip_code}",
        }
        if self.api_key:
            params["key"] = self.api_key

        url = f"{self.BASE_URL}/{year}/{self.dataset}"
        response = self.session.get(url, params=params, timeout=30)
        response.raise_for_status()
        data = response.json()
        if len(data) < 2:
            raise RuntimeError(f"ACS query returned no rows for ZIP {zip_code}")

        row = dict(zip(data[0], data[1]))
        metrics: Dict[str, Optional[float]] = {}
        for key, column in self.ACS_METRICS.items():
            value = _to_float(row.get(column))
            # ACS encodes suppressed estimates as large negative sentinels
            metrics[key] = value if value is not None and value > 0 else None
        return metrics

    def fetch_location_stats(
        self, zip_code: str, *, year: int = 2023, state: str = ""
    ) -> LocationStats:
        latest = self.fetch_housing_metrics(zip_code, year=year)
        earlier = self.fetch_housing_metrics(
            zip_code, year=year - GROWTH_WINDOW_YEARS
        )

        return LocationStats(
            zip_code=zip_code,
            city="",
            state=state,
            median_home_price=latest["median_home_value"] or 0.0,
            average_rent=latest["median_rent"] or 0.0,
            property_tax_rate=property_tax_rate_for(state),
            home_appreciation_rate=annual_growth_rate(
                earlier["median_home_value"],
                latest["median_home_value"],
                GROWTH_WINDOW_YEARS,
            ),
            rent_growth_rate=annual_growth_rate(
                earlier["median_rent"], latest["median_rent"], GROWTH_WINDOW_YEARS
            ),
        )


@dataclass
class LocationDataAssembler:
    """Resolve a ZIP from the local table first, then the Census API."""

    table: Optional[ZipCodeTable] = None
    acs_client: Optional[CensusACSClient] = None

    def lookup(self, zip_code: str, *, acs_year: int = 2023) -> Optional[LocationStats]:
        if self.table is not None:
            stats = self.table.lookup(zip_code)
            if stats is not None:
                return stats
            logger.info("ZIP %s not in local table", zip_code)

        if self.acs_client is not None:
            logger.info("Fetching ACS %s data for ZIP %s", acs_year, zip_code)
            return self.acs_client.fetch_location_stats(zip_code, year=acs_year)

        logger.warning("No location data available for ZIP %s", zip_code)
        return None


def _read_zillow_csv(
    path: Union[str, Path], value_key: str
) -> Dict[str, Dict[str, object]]:
    """Latest value per ZIP plus its growth over the preceding five years."""
    with open(path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        date_columns = [c for c in reader.fieldnames or [] if _DATE_COLUMN.match(c)]
        if "RegionName" not in (reader.fieldnames or []) or not date_columns:
            raise ValueError(f"{path} is not a Zillow ZIP-level CSV")

        latest = date_columns[-1]
        earlier = (
            date_columns[-1 - GROWTH_WINDOW_MONTHS]
            if len(date_columns) > GROWTH_WINDOW_MONTHS
            else None
        )
        if earlier is None:
            logger.warning("%s has under five years of history; no growth rates", path)

        rows: Dict[str, Dict[str, object]] = {}
        skipped = 0
        for row in reader:
            zip_code = (row.get("RegionName") or "").strip()
            value = _to_float(row.get(latest))
            if not zip_code or value is None:
                skipped += 1
                continue
            old_value = _to_float(row.get(earlier)) if earlier else None
            rows[zip_code.zfill(5)] = {
                "state": row.get("StateName") or row.get("State") or "",
                "city": row.get("City") or "",
                value_key: round(value),
                f"{value_key}GrowthRate": annual_growth_rate(
                    old_value, value, GROWTH_WINDOW_YEARS
                ),
            }

    logger.info("Read %d ZIP codes from %s (%d skipped)", len(rows), path, skipped)
    return rows


def _to_float(value: object) -> Optional[float]:
    if value in (None, "", "null"):
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Could not convert value '{value}' to float") from exc
