from __future__ import annotations

from datetime import date

import pytest

from lead_sourcing.eligibility import (
    EligibilityPolicy,
    evaluate,
    is_investable,
    is_private_entity,
)
from lead_sourcing.models import Lead, PostcodeRange

from conftest import TODAY, make_lead


def test_public_company_is_excluded() -> None:
    lead = make_lead(entity_type="Australian Public Company", registration_date=date(2000, 1, 1))
    verdict = evaluate(lead, EligibilityPolicy(min_age=15), TODAY)
    assert not verdict.selected
    assert verdict.failed_check == "private"


def test_proprietary_limited_is_included() -> None:
    lead = make_lead(entity_type="Proprietary Limited", registration_date=date(2000, 1, 1))
    assert evaluate(lead, EligibilityPolicy(min_age=15), TODAY).selected


@pytest.mark.parametrize("entity_type", [
    "Public Company",
    "Commonwealth Government Entity",
    "Sole Trader",
    "Individual/Sole Trader",
    "Other Incorporated Entity",
    "Discretionary Trading Trust",
])
def test_denylisted_entity_types(entity_type: str) -> None:
    assert not is_private_entity(Lead(entity_type=entity_type))


def test_unknown_entity_type_defaults_to_private() -> None:
    assert is_private_entity(Lead(entity_type="Something Brand New"))
    assert is_private_entity(Lead())


def test_checks_run_in_order() -> None:
    # Fails age, jurisdiction, gst and private; only the first is reported
    lead = Lead(
        name="Young Trust",
        state="QLD",
        entity_type="Trust",
        registration_date=date(2024, 1, 1),
    )
    policy = EligibilityPolicy(min_age=15, states=["VIC"])
    assert evaluate(lead, policy, TODAY).failed_check == "age"

    lead.registration_date = date(2000, 1, 1)
    assert evaluate(lead, policy, TODAY).failed_check == "jurisdiction"

    lead.state = "vic"
    assert evaluate(lead, policy, TODAY).failed_check == "gst"

    lead.gst_registered = True
    assert evaluate(lead, policy, TODAY).failed_check == "private"


def test_age_boundary_is_inclusive() -> None:
    lead = make_lead(registration_date=date(2011, 6, 15))
    assert evaluate(lead, EligibilityPolicy(min_age=15), TODAY).selected
    lead.registration_date = date(2011, 6, 16)
    assert evaluate(lead, EligibilityPolicy(min_age=15), TODAY).failed_check == "age"


class TestInvestable:
    def test_no_filters_allows_everything(self) -> None:
        assert is_investable(Lead(state=""), [], [])

    def test_state_match_is_case_insensitive(self) -> None:
        assert is_investable(Lead(state="vic"), ["VIC", "NSW"], [])
        assert not is_investable(Lead(state="QLD"), ["VIC", "NSW"], [])

    def test_states_take_precedence_over_postcodes(self) -> None:
        ranges = [PostcodeRange(min=2000, max=2999)]
        assert is_investable(Lead(state="VIC", postcode="3000"), ["VIC"], ranges)

    def test_postcodes_apply_without_states(self) -> None:
        ranges = [PostcodeRange(min=3000, max=3999), PostcodeRange(min=2000, max=2099)]
        assert is_investable(Lead(postcode="2050"), [], ranges)
        assert not is_investable(Lead(postcode="4000"), [], ranges)
        assert not is_investable(Lead(postcode=""), [], ranges)
