"""Tests for ZIP lookups, the Census client and helpers."""

import csv
import json

import pytest
from rent_vs_buy.data_sources import (
    CensusACSClient,
    LocationDataAssembler,
    ZipCodeTable,
    annual_growth_rate,
    detect_zip_code,
    property_tax_rate_for,
)


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class FakeSession:
    """Serves canned ACS rows keyed by vintage year."""

    def __init__(self, rows_by_year):
        self.rows_by_year = rows_by_year
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        year = int(url.split("/")[-3])
        header = ["NAME", "B25064_001E", "B25077_001E", "zip code tabulation area"]
        row = self.rows_by_year.get(year)
        return FakeResponse([header, row] if row else [header])


@pytest.fixture
def zip_table(tmp_path):
    path = tmp_path / "zipCodeData.json"
    path.write_text(
        json.dumps(
            {
                "94110": {
                    "state": "CA",
                    "city": "San Francisco",
                    "homeValue": 1250000,
                    "homeValueGrowthRate": 1.2,
                    "rentValue": 3400,
                    "rentValueGrowthRate": 2.1,
                },
                "59801": {
                    "state": "MT",
                    "city": "Missoula",
                    "homeValue": 480000,
                    "homeValueGrowthRate": None,
                },
            }
        )
    )
    return ZipCodeTable.from_path(path)


class TestHelpers:
    def test_detect_zip(self):
        assert detect_zip_code("I live in 94110 and pay 3400") == "94110"

    def test_detect_zip_ignores_longer_numbers(self):
        assert detect_zip_code("budget is 500000") is None

    def test_property_tax_rate(self):
        assert property_tax_rate_for("NJ") == 2.0
        assert property_tax_rate_for("tx") == 1.6
        assert property_tax_rate_for("ZZ") == 1.0
        assert property_tax_rate_for(None) == 1.0

    def test_growth_rate(self):
        assert annual_growth_rate(500000, 600000, 5) == 3.71

    @pytest.mark.parametrize("old,new", [(None, 100), (100, None), (0, 100), (-5, 100)])
    def test_growth_rate_missing(self, old, new):
        assert annual_growth_rate(old, new, 5) is None


class TestZipCodeTable:
    def test_lookup(self, zip_table):
        stats = zip_table.lookup("94110")
        assert stats.city == "San Francisco"
        assert stats.median_home_price == 1250000
        assert stats.average_rent == 3400
        assert stats.property_tax_rate == 0.7
        assert stats.home_appreciation_rate == 1.2
        assert stats.has_market_trends

    def test_partial_row(self, zip_table):
        stats = zip_table.lookup("59801")
        assert stats.average_rent == 0.0
        assert stats.rent_growth_rate is None
        assert not stats.has_market_trends

    def test_unknown(self, zip_table):
        assert zip_table.lookup("00000") is None
        assert "94110" in zip_table
        assert len(zip_table) == 2

    def test_bad_value(self):
        table = ZipCodeTable({"10001": {"state": "NY", "homeValue": "n/a"}})
        with pytest.raises(ValueError, match="n/a"):
            table.lookup("10001")


class TestCensusACSClient:
    def test_location_stats(self):
        session = FakeSession(
            {
                2023: ["ZCTA5 94110", "2000", "600000", "94110"],
                2018: ["ZCTA5 94110", "1600", "500000", "94110"],
            }
        )
        client = CensusACSClient(api_key="secret", session=session)
        stats = client.fetch_location_stats("94110", year=2023, state="CA")

        assert stats.median_home_price == 600000
        assert stats.average_rent == 2000
        assert stats.home_appreciation_rate == 3.71
        assert stats.rent_growth_rate == 4.56
        assert stats.property_tax_rate == 0.7
        url, params = session.calls[0]
        assert url == "https://api.census.gov/data/2023/acs/acs5"
        assert params["for"] == "zip code tabulation area:94110"
        assert params["key"] == "secret"

    def test_suppressed_values(self):
        session = FakeSession(
            {
                2023: ["ZCTA5 00601", "-666666666", "120000", "00601"],
                2018: ["ZCTA5 00601", "500", "100000", "00601"],
            }
        )
        stats = CensusACSClient(api_key=None, session=session).fetch_location_stats("00601")
        assert stats.average_rent == 0.0
        assert stats.rent_growth_rate is None
        assert stats.home_appreciation_rate is not None
        assert "key" not in session.calls[0][1]

    def test_no_rows(self):
        client = CensusACSClient(api_key=None, session=FakeSession({}))
        with pytest.raises(RuntimeError, match="no rows"):
            client.fetch_housing_metrics("99999")


class TestLocationDataAssembler:
    def test_table_first(self, zip_table):
        session = FakeSession({})
        assembler = LocationDataAssembler(
            table=zip_table, acs_client=CensusACSClient(api_key=None, session=session)
        )
        assert assembler.lookup("94110").city == "San Francisco"
        assert session.calls == []

    def test_falls_back_to_census(self, zip_table):
        session = FakeSession(
            {
                2023: ["ZCTA5 73301", "1500", "300000", "73301"],
                2018: ["ZCTA5 73301", "1200", "250000", "73301"],
            }
        )
        assembler = LocationDataAssembler(
            table=zip_table, acs_client=CensusACSClient(api_key=None, session=session)
        )
        assert assembler.lookup("73301").median_home_price == 300000

    def test_no_source(self):
        assert LocationDataAssembler().lookup("94110") is None


MONTHS = [f"{2019 + i // 12}-{i % 12 + 1:02d}-28" for i in range(61)]


def write_zillow_csv(path, rows, months=MONTHS):
    """rows: (zip, state, city, first value, last value); middle months stay blank."""
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["RegionID", "SizeRank", "RegionName", "StateName", "City"] + months)
        for index, (zip_code, state, city, first, last) in enumerate(rows):
            values = [first] + [""] * (len(months) - 2) + [last]
            writer.writerow([index, index, zip_code, state, city] + values)
    return path


class TestZillowCsvs:
    @pytest.fixture
    def table(self, tmp_path):
        home = write_zillow_csv(
            tmp_path / "zhvi.csv",
            [
                ("94110", "CA", "San Francisco", 500000, 600000),
                ("59801", "MT", "Missoula", 400000, 480000),
                ("60601", "IL", "Chicago", 300000, ""),
            ],
        )
        rent = write_zillow_csv(
            tmp_path / "zori.csv",
            [
                ("94110", "CA", "San Francisco", 1600, 2000),
                ("501", "NY", "Holtsville", "", 1800),
            ],
        )
        return ZipCodeTable.from_zillow_csvs(home, rent)

    def test_growth_over_five_years(self, table):
        stats = table.lookup("94110")
        assert stats.median_home_price == 600000
        assert stats.average_rent == 2000
        assert stats.home_appreciation_rate == 3.71
        assert stats.rent_growth_rate == 4.56
        assert stats.has_market_trends

    def test_home_only_zip(self, table):
        stats = table.lookup("59801")
        assert stats.home_appreciation_rate == 3.71
        assert stats.average_rent == 0.0
        assert not stats.has_market_trends

    def test_rent_only_zip_is_padded(self, table):
        stats = table.lookup("00501")
        assert stats.state == "NY"
        assert stats.average_rent == 1800
        assert stats.rent_growth_rate is None

    def test_missing_latest_value_skipped(self, table):
        assert "60601" not in table
        assert len(table) == 3

    def test_short_history_has_no_growth(self, tmp_path):
        months = MONTHS[-24:]
        home = write_zillow_csv(tmp_path / "h.csv", [("94110", "CA", "SF", 1, 600000)], months)
        rent = write_zillow_csv(tmp_path / "r.csv", [("94110", "CA", "SF", 1, 2000)], months)
        stats = ZipCodeTable.from_zillow_csvs(home, rent).lookup("94110")
        assert stats.home_appreciation_rate is None
        assert stats.rent_growth_rate is None

    def test_not_a_zillow_file(self, tmp_path):
        path = tmp_path / "other.csv"
        path.write_text("zip,value\n94110,5\n")
        with pytest.raises(ValueError, match="not a Zillow"):
            ZipCodeTable.from_zillow_csvs(path, path)

    def test_save_round_trips_through_json(self, table, tmp_path):
        path = tmp_path / "zipCodeData.json"
        table.save(path)
        assert ZipCodeTable.from_path(path).lookup("94110") == table.lookup("94110")
