"""Shared fixtures: an in-memory Forgejo behind httpx.MockTransport."""

import json
import re

import httpx
import pytest

from forgeteam.client import ForgejoClient
from forgeteam.config import ProviderConfig
from forgeteam.teams.reconciler import TeamReconciler

API = "/api/v1"


class FakeForgejo:
    """Just enough of the Forgejo team API to exercise the client."""

    def __init__(self, orgs=("tftest", "test-org")):
        self.orgs = set(orgs)
        self.teams: dict[int, dict] = {}
        self.requests: list[tuple[str, str]] = []
        self.next_id = 1
        self.fail_next: Exception | None = None
        self.status_override: tuple[int, dict] | None = None
        self.on_request = None

    # -- helpers used by tests -----------------------------------------------

    def add_team(self, org: str, name: str, **fields) -> int:
        team_id = self.next_id
        self.next_id += 1
        self.teams[team_id] = {
            "id": team_id,
            "name": name,
            "org": org,
            "description": fields.get("description", ""),
            "permission": fields.get("permission", "none"),
            "units": list(fields.get("units", ["repo.code"])),
            "can_create_org_repo": fields.get("can_create_org_repo", False),
            "includes_all_repositories": fields.get("includes_all_repositories", False),
        }
        return team_id

    def mutating_calls(self) -> list[tuple[str, str]]:
        return [r for r in self.requests if r[0] in ("POST", "PATCH", "DELETE")]

    # -- transport -----------------------------------------------------------

    def _payload(self, team: dict) -> dict:
        out = {k: v for k, v in team.items() if k != "org"}
        out["organization"] = {"id": 1, "username": team["org"], "name": team["org"]}
        out["units_map"] = {u: "read" for u in team["units"]}
        return out

    def _find(self, org: str, name: str):
        for team in self.teams.values():
            if team["org"] == org and team["name"].lower() == name.lower():
                return team
        return None

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))

        if self.on_request is not None:
            self.on_request(request)

        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error
        if self.status_override is not None:
            status, body = self.status_override
            self.status_override = None
            return httpx.Response(status, json=body)

        body = json.loads(request.content) if request.content else {}

        m = re.fullmatch(rf"{API}/orgs/([^/]+)/teams/search", path)
        if m and request.method == "GET":
            org = m.group(1)
            if org not in self.orgs:
                return httpx.Response(404, json={"message": "The target couldn't be found."})
            q = request.url.params.get("q", "").lower()
            page = int(request.url.params.get("page", 1))
            limit = int(request.url.params.get("limit", 10))
            hits = [
                self._payload(t)
                for t in self.teams.values()
                if t["org"] == org and q in t["name"].lower()
            ]
            window = hits[(page - 1) * limit : page * limit]
            return httpx.Response(200, json={"data": window, "ok": True})

        m = re.fullmatch(rf"{API}/orgs/([^/]+)/teams", path)
        if m and request.method == "POST":
            org = m.group(1)
            if org not in self.orgs:
                return httpx.Response(404, json={"message": "The target couldn't be found."})
            if self._find(org, body["name"]):
                return httpx.Response(
                    422, json={"message": f"team already exists [org_id: 1, name: {body['name']}]"}
                )
            fields = {k: v for k, v in body.items() if k != "name"}
            team_id = self.add_team(org, body["name"], **fields)
            return httpx.Response(201, json=self._payload(self.teams[team_id]))

        m = re.fullmatch(rf"{API}/teams/(\d+)", path)
        if m:
            team = self.teams.get(int(m.group(1)))
            if team is None:
                return httpx.Response(404, json={"message": "The target couldn't be found."})
            if request.method == "GET":
                return httpx.Response(200, json=self._payload(team))
            if request.method == "PATCH":
                if "name" in body:
                    clash = self._find(team["org"], body["name"])
                    if clash is not None and clash is not team:
                        return httpx.Response(
                            422, json={"message": f"team already exists [name: {body['name']}]"}
                        )
                for key in (
                    "name",
                    "description",
                    "permission",
                    "units",
                    "can_create_org_repo",
                    "includes_all_repositories",
                ):
                    if key in body:
                        team[key] = body[key]
                return httpx.Response(200, json=self._payload(team))
            if request.method == "DELETE":
                del self.teams[team["id"]]
                return httpx.Response(204)

        return httpx.Response(404, json={"message": "no route"})


@pytest.fixture
def fake():
    return FakeForgejo()


@pytest.fixture
def config():
    return ProviderConfig(host="https://forge.test", api_token="secret-token", timeout=5.0)


@pytest.fixture
def client(fake, config):
    c = ForgejoClient(config, transport=httpx.MockTransport(fake.handler))
    yield c
    c.close()


@pytest.fixture
def reconciler(client):
    return TeamReconciler(client)
