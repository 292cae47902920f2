"""Typed errors surfaced by the reconciler.

Every failure carries a ``retryable`` flag so the caller can decide between
retrying and reporting. Nothing in forgeteam converts one of these into a
fallback value.
"""

from __future__ import annotations


class ForgeteamError(Exception):
    """Base class for all forgeteam errors."""

    retryable = False


class ValidationError(ForgeteamError):
    """A declared team is malformed (caller's fault)."""

    def __init__(self, issues: list) -> None:
        self.issues = list(issues)
        details = "; ".join(str(i) for i in self.issues) or "invalid team specification"
        super().__init__(details)


class OrganizationNotFound(ForgeteamError):
    """The parent organization does not exist on the platform."""

    def __init__(self, organization: str) -> None:
        self.organization = organization
        super().__init__(f"Organization with name '{organization}' not found")


class AlreadyExists(ForgeteamError):
    """A team with the same name already exists in the organization."""

    def __init__(self, organization: str, name: str) -> None:
        self.organization = organization
        self.name = name
        super().__init__(
            f"Team '{name}' already exists in organization '{organization}'. "
            "Set import_if_exists to adopt it."
        )


class NotFound(ForgeteamError):
    """The team being operated on no longer exists remotely."""

    def __init__(self, what: str, team_id: int | None = None) -> None:
        self.team_id = team_id
        super().__init__(f"{what} not found")


class NetworkError(ForgeteamError):
    """Transport failure or timeout talking to the platform."""

    retryable = True


class ApiError(ForgeteamError):
    """The platform answered with an unexpected status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.retryable = status_code >= 500
        super().__init__(f"HTTP {status_code}: {message}")


class ConfigError(ForgeteamError):
    """Provider configuration or declaration file is unusable."""


class StateError(ForgeteamError):
    """The local state file cannot be read or written."""
