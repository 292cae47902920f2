"""Thin synchronous wrapper around the Forgejo/Gitea REST API.

Only the team endpoints scoped to an organization are covered. Responses are
normalized into ``TeamRecord`` and failures into the typed errors from
``forgeteam.errors``. No retries happen here; a timeout surfaces as a
retryable ``NetworkError`` and the caller decides what to do.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from loguru import logger

from forgeteam import __version__
from forgeteam.config import ProviderConfig
from forgeteam.errors import (
    AlreadyExists,
    ApiError,
    NetworkError,
    NotFound,
    OrganizationNotFound,
    ValidationError,
)
from forgeteam.teams.models import Permission, TeamRecord
from forgeteam.teams.units import normalize_units

SEARCH_PAGE_SIZE = 50


class ForgejoClient:
    """Client for the team endpoints of a Forgejo instance.

    Parameters
    ----------
    config : ProviderConfig
        Host, credentials and timeout.
    transport : httpx.BaseTransport | None
        Optional transport override, used by tests to stand in for the server.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config
        headers = {
            "Accept": "application/json",
            "User-Agent": f"forgeteam/{__version__}",
        }
        auth = None
        if config.api_token:
            headers["Authorization"] = f"token {config.api_token}"
        elif config.username:
            auth = httpx.BasicAuth(config.username, config.password)

        self._http = httpx.Client(
            base_url=config.base_url,
            headers=headers,
            auth=auth,
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ForgejoClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -- teams ---------------------------------------------------------------

    def search_teams(self, organization: str, query: str) -> list[TeamRecord]:
        """Return every team in ``organization`` whose name matches ``query``.

        The platform matches substrings; exact matching is the caller's job.
        """
        records: list[TeamRecord] = []
        page = 1
        while True:
            response = self._request(
                "GET",
                f"/orgs/{organization}/teams/search",
                params={"q": query, "page": page, "limit": SEARCH_PAGE_SIZE},
            )
            if response.status_code == 404:
                raise OrganizationNotFound(organization)
            self._check(response)
            body = response.json()
            if not body.get("ok", True):
                raise ApiError(response.status_code, f"team search failed in '{organization}'")
            batch = body.get("data") or []
            records.extend(self._record_from_payload(t, organization) for t in batch)
            if len(batch) < SEARCH_PAGE_SIZE:
                return records
            page += 1

    def get_team(self, team_id: int) -> TeamRecord:
        response = self._request("GET", f"/teams/{team_id}")
        if response.status_code == 404:
            raise NotFound(f"Team with id {team_id}", team_id)
        self._check(response)
        return self._record_from_payload(response.json())

    def create_team(self, organization: str, body: dict) -> TeamRecord:
        response = self._request("POST", f"/orgs/{organization}/teams", json=body)
        if response.status_code == 404:
            raise OrganizationNotFound(organization)
        if self._is_duplicate(response):
            raise AlreadyExists(organization, body.get("name", ""))
        self._check(response)
        return self._record_from_payload(response.json(), organization)

    def edit_team(self, team_id: int, body: dict, organization: str = "") -> TeamRecord:
        response = self._request("PATCH", f"/teams/{team_id}", json=body)
        if response.status_code == 404:
            raise NotFound(f"Team with id {team_id}", team_id)
        if self._is_duplicate(response):
            raise AlreadyExists(organization, body.get("name", ""))
        self._check(response)
        return self._record_from_payload(response.json(), organization)

    def delete_team(self, team_id: int) -> bool:
        """Delete a team. Returns False if it was already gone."""
        response = self._request("DELETE", f"/teams/{team_id}")
        if response.status_code == 404:
            return False
        self._check(response)
        return True

    # -- internals -----------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug("{} {}", method, path)
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{method} {path} timed out after {self.config.timeout}s") from e
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e
        logger.debug("{} {} -> {}", method, path, response.status_code)
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("message") or body.get("errors") or body)
        return str(body)

    def _is_duplicate(self, response: httpx.Response) -> bool:
        if response.status_code == 409:
            return True
        if response.status_code == 422:
            return "already exist" in self._error_message(response).lower()
        return False

    def _check(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        message = self._error_message(response)
        if response.status_code == 422:
            raise ValidationError([message])
        raise ApiError(response.status_code, message)

    @staticmethod
    def _record_from_payload(payload: dict, organization: str = "") -> TeamRecord:
        org_obj = payload.get("organization") or {}
        org_name = org_obj.get("username") or org_obj.get("name") or organization
        if not org_name:
            raise ApiError(200, f"team {payload.get('id')} carries no organization")

        raw_permission = payload.get("permission") or Permission.none.value
        try:
            permission = Permission(raw_permission)
        except ValueError:
            raise ApiError(
                200, f"team '{payload.get('name')}' has unsupported permission '{raw_permission}'"
            )

        return TeamRecord(
            id=int(payload["id"]),
            name=payload["name"],
            organization=org_name,
            permission=permission,
            units=normalize_units(payload.get("units") or []),
            can_create_org_repo=bool(payload.get("can_create_org_repo", False)),
            description=payload.get("description") or "",
            includes_all_repositories=bool(payload.get("includes_all_repositories", False)),
        )
