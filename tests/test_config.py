from __future__ import annotations

import pytest

from lead_sourcing.config import DEFAULT_SOURCES, load_config, parse_csv_list, parse_postcode_ranges


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a developer's .env out of these tests
    monkeypatch.setattr("lead_sourcing.config.load_dotenv", lambda: False)
    for key in ("ABR_GUID", "SOURCING_DB", "SOURCING_OUTDIR", "ENRICH_DELAY",
                "REQUEST_DELAY", "HTTP_TIMEOUT", "SOURCE_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)


def test_parse_csv_list() -> None:
    assert parse_csv_list("rto, abr,,semma ") == ["rto", "abr", "semma"]
    assert parse_csv_list("vic,nsw", upper=True) == ["VIC", "NSW"]
    assert parse_csv_list("") == []
    assert parse_csv_list(None) == []


def test_parse_postcode_ranges() -> None:
    ranges = parse_postcode_ranges("3000-3999, 2000-2599")
    assert [(r.min, r.max) for r in ranges] == [(3000, 3999), (2000, 2599)]
    assert parse_postcode_ranges("") == []
    with pytest.raises(ValueError):
        parse_postcode_ranges("3000")


def test_missing_guid_exits(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as excinfo:
        load_config()
    assert excinfo.value.code == 1
    assert "ABR_GUID" in capsys.readouterr().err


def test_guid_optional_when_not_required() -> None:
    config = load_config(require_guid=False)
    assert config.abr_guid == ""
    assert config.sources == DEFAULT_SOURCES
    assert config.min_age == 15


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ABR_GUID", "abc-123")
    monkeypatch.setenv("SOURCING_DB", "/data/leads.duckdb")
    monkeypatch.setenv("ENRICH_DELAY", "1.5")
    monkeypatch.setenv("SOURCE_TIMEOUT", "60")

    config = load_config()

    assert config.abr_guid == "abc-123"
    assert config.db_path == "/data/leads.duckdb"
    assert config.enrich_delay == 1.5
    assert config.source_timeout == 60
    assert config.http_timeout == 15

