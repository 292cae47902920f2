"""HTTP client for the Forgejo/Gitea team API."""

from forgeteam.client.forgejo import ForgejoClient

__all__ = ["ForgejoClient"]
