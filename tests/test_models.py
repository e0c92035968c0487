from __future__ import annotations

from datetime import date

import pytest

from lead_sourcing.models import DeleteFilters, Lead, PostcodeRange


def test_abn_spaces_are_stripped() -> None:
    assert Lead(abn="51 824 753 556").abn == "51824753556"
    assert Lead(abn=None).abn == ""


def test_sources_deduplicate_on_construction() -> None:
    lead = Lead(sources=["RTO", "RTO", " AMTIL ", ""])
    assert lead.sources == ["RTO", "AMTIL"]


def test_sources_accept_serialised_string() -> None:
    assert Lead(sources="RTO,SEMMA").sources == ["RTO", "SEMMA"]


def test_add_sources_is_a_union() -> None:
    lead = Lead(sources=["RTO"])
    lead.add_sources("SEMMA", "RTO", "SEMMA")
    assert lead.sources == ["RTO", "SEMMA"]


class TestAgeYears:
    def test_exact_anniversary_counts(self) -> None:
        today = date(2026, 10, 19)
        lead = Lead(registration_date=date(2025, 10, 19))
        assert lead.age_years(today) == 1

    def test_day_before_anniversary(self) -> None:
        today = date(2026, 10, 18)
        lead = Lead(registration_date=date(2025, 10, 19))
        assert lead.age_years(today) == 0

    def test_future_registration_clamps_to_zero(self) -> None:
        today = date(2026, 10, 19)
        lead = Lead(registration_date=date(2030, 1, 1))
        assert lead.age_years(today) == 0

    def test_unknown_date_is_zero(self) -> None:
        assert Lead().age_years(date(2026, 1, 1)) == 0

    def test_sixteen_years(self) -> None:
        today = date(2026, 6, 15)
        assert Lead(registration_date=date(2010, 6, 15)).age_years(today) == 16


class TestPostcodeRange:
    def test_parse_and_contains(self) -> None:
        r = PostcodeRange.parse("3000-3999")
        assert (r.min, r.max) == (3000, 3999)
        assert r.contains("3000")
        assert r.contains(3999)
        assert not r.contains("4000")

    def test_non_numeric_postcode_is_outside(self) -> None:
        assert not PostcodeRange(min=3000, max=3999).contains("")
        assert not PostcodeRange(min=3000, max=3999).contains("VIC")

    def test_parse_rejects_single_value(self) -> None:
        with pytest.raises(ValueError):
            PostcodeRange.parse("3000")


def test_delete_filters_active_ignores_blank_and_zero_age() -> None:
    assert DeleteFilters().active() == {}
    assert DeleteFilters(name="", age=0).active() == {}
    assert DeleteFilters(source="rto", age=5).active() == {"source": "rto", "age": 5}
