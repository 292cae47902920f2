"""Tests for the Forgejo HTTP client: payload normalization and error mapping."""

import httpx
import pytest

from forgeteam.client import ForgejoClient
from forgeteam.config import ProviderConfig
from forgeteam.errors import (
    AlreadyExists,
    ApiError,
    NetworkError,
    NotFound,
    OrganizationNotFound,
    ValidationError,
)
from forgeteam.teams.models import Permission


def test_token_auth_header(fake, client):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        return fake.handler(request)

    c = ForgejoClient(client.config, transport=httpx.MockTransport(handler))
    c.search_teams("tftest", "devs")
    assert seen["auth"] == "token secret-token"


def test_basic_auth_header(fake):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        return fake.handler(request)

    config = ProviderConfig(host="https://forge.test", username="root", password="pw")
    c = ForgejoClient(config, transport=httpx.MockTransport(handler))
    c.search_teams("tftest", "devs")
    assert seen["auth"].startswith("Basic ")


def test_requests_go_under_api_prefix(fake, client):
    client.search_teams("tftest", "devs")
    assert fake.requests == [("GET", "/api/v1/orgs/tftest/teams/search")]


def test_missing_organization(client):
    with pytest.raises(OrganizationNotFound) as exc_info:
        client.search_teams("test_org", "devs")
    assert str(exc_info.value) == "Organization with name 'test_org' not found"


def test_create_normalizes_payload(client):
    record = client.create_team(
        "tftest",
        {"name": "devs", "permission": "write", "units": ["repo.pulls", "repo.code"]},
    )
    assert record.organization == "tftest"
    assert record.permission is Permission.write
    assert record.units == frozenset({"repo.code", "repo.pulls"})
    assert record.description == ""


def test_create_duplicate_maps_to_already_exists(fake, client):
    fake.add_team("tftest", "devs")
    with pytest.raises(AlreadyExists) as exc_info:
        client.create_team("tftest", {"name": "devs", "units": ["repo.code"]})
    assert "Team 'devs' already exists" in str(exc_info.value)


def test_conflict_status_maps_to_already_exists(fake, client):
    fake.status_override = (409, {"message": "conflict"})
    with pytest.raises(AlreadyExists):
        client.create_team("tftest", {"name": "devs"})


def test_create_in_missing_org(client):
    with pytest.raises(OrganizationNotFound):
        client.create_team("nope", {"name": "devs"})


def test_other_422_is_validation_error(fake, client):
    fake.status_override = (422, {"message": "permission: invalid"})
    with pytest.raises(ValidationError):
        client.create_team("tftest", {"name": "devs"})


def test_server_error_is_retryable_api_error(fake, client):
    fake.status_override = (503, {"message": "maintenance"})
    with pytest.raises(ApiError) as exc_info:
        client.get_team(1)
    assert exc_info.value.status_code == 503
    assert exc_info.value.retryable


def test_forbidden_is_not_retryable(fake, client):
    fake.status_override = (403, {"message": "token does not have required scope"})
    with pytest.raises(ApiError) as exc_info:
        client.get_team(1)
    assert not exc_info.value.retryable


def test_timeout_is_retryable_network_error(fake, client):
    fake.fail_next = httpx.ReadTimeout("read timed out")
    with pytest.raises(NetworkError) as exc_info:
        client.get_team(1)
    assert exc_info.value.retryable


def test_connection_failure_is_network_error(fake, client):
    fake.fail_next = httpx.ConnectError("connection refused")
    with pytest.raises(NetworkError):
        client.search_teams("tftest", "devs")


def test_get_missing_team(client):
    with pytest.raises(NotFound) as exc_info:
        client.get_team(999)
    assert exc_info.value.team_id == 999


def test_delete_missing_team_reports_absent(client):
    assert client.delete_team(999) is False


def test_search_paginates(fake, client):
    for i in range(55):
        fake.add_team("tftest", f"team-{i:02d}")
    records = client.search_teams("tftest", "team-")
    assert len(records) == 55
    pages = [p for m, p in fake.requests if p.endswith("/teams/search")]
    assert len(pages) == 2


def test_owner_permission_is_rejected(fake, client):
    team_id = fake.add_team("tftest", "Owners", permission="owner")
    with pytest.raises(ApiError):
        client.get_team(team_id)
