"""Tests for the spec builder and capability-unit handling."""

import pytest

from forgeteam.errors import ValidationError
from forgeteam.teams.models import Permission, TeamRecord
from forgeteam.teams.spec_builder import build_spec
from forgeteam.teams.units import diff_units, encode_units, normalize_units, units_equal


def _codes(exc_info) -> set[str]:
    return {i.code for i in exc_info.value.issues}


# --- Spec Builder Tests ---


def test_defaults_are_filled_in():
    spec = build_spec({"name": "tftest", "organization": "tftest"})
    assert spec.permission is Permission.none
    assert spec.units is None
    assert spec.can_create_org_repo is False
    assert spec.description == ""
    assert spec.includes_all_repositories is False
    assert spec.import_if_exists is False


def test_full_declaration():
    spec = build_spec(
        {
            "name": "test_team",
            "organization": "tftest",
            "can_create_org_repo": True,
            "description": "Test team.",
            "permission": "read",
            "units": ["repo.code", "repo.pulls", "repo.code"],
        }
    )
    assert spec.permission is Permission.read
    assert spec.units == frozenset({"repo.code", "repo.pulls"})
    assert spec.can_create_org_repo is True
    assert spec.description == "Test team."


def test_empty_name_and_organization_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "", "organization": "  "})
    issues = exc_info.value.issues
    assert {i.path for i in issues} == {"name", "organization"}
    assert _codes(exc_info) == {"REQUIRED"}


def test_missing_name_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"organization": "tftest"})
    assert "REQUIRED" in _codes(exc_info)


def test_invalid_permission_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "t", "organization": "o", "permission": "owner"})
    assert _codes(exc_info) == {"INVALID_PERMISSION"}
    assert "owner" in str(exc_info.value)


def test_empty_units_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "t", "organization": "o", "units": []})
    assert _codes(exc_info) == {"UNITS_EMPTY"}


def test_unknown_unit_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "t", "organization": "o", "units": ["repo.code", "repo.teleport"]})
    assert _codes(exc_info) == {"UNKNOWN_UNIT"}
    assert "repo.teleport" in str(exc_info.value)


def test_units_must_be_a_list():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "t", "organization": "o", "units": "repo.code"})
    assert _codes(exc_info) == {"NOT_A_LIST"}


@pytest.mark.parametrize("units", [5, True, {"repo.code": "read"}])
def test_units_scalar_rejected(units):
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "t", "organization": "o", "units": units})
    assert _codes(exc_info) == {"NOT_A_LIST"}


def test_non_bool_flag_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "t", "organization": "o", "import_if_exists": "yes"})
    assert _codes(exc_info) == {"NOT_A_BOOL"}


def test_unknown_attribute_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "t", "organization": "o", "members": ["alice"]})
    assert _codes(exc_info) == {"UNKNOWN_ATTRIBUTE"}


def test_all_issues_reported_together():
    with pytest.raises(ValidationError) as exc_info:
        build_spec({"name": "", "organization": "o", "permission": "root", "units": []})
    assert _codes(exc_info) == {"REQUIRED", "INVALID_PERMISSION", "UNITS_EMPTY"}


# --- Units Tests ---


def test_units_ignore_order_and_duplicates():
    assert units_equal(["repo.code", "repo.issues"], ["repo.issues", "repo.code", "repo.code"])
    assert normalize_units([" repo.code "]) == frozenset({"repo.code"})


def test_units_diff():
    diff = diff_units(["repo.code", "repo.wiki"], ["repo.code", "repo.pulls"])
    assert diff.added == frozenset({"repo.pulls"})
    assert diff.removed == frozenset({"repo.wiki"})
    assert diff.changed
    assert diff.summary() == "+repo.pulls, -repo.wiki"
    assert not diff_units(["repo.code"], ["repo.code"]).changed


def test_encode_units_is_sorted():
    assert encode_units({"repo.wiki", "repo.code"}) == ["repo.code", "repo.wiki"]


# --- Record Tests ---


def test_record_round_trips_through_dict():
    record = TeamRecord(
        id=7,
        name="test_team",
        organization="tftest",
        permission="admin",
        units=["repo.pulls", "repo.code"],
    )
    assert record.permission is Permission.admin
    assert record.to_dict()["units"] == ["repo.code", "repo.pulls"]
    assert TeamRecord.from_dict(record.to_dict()) == record
