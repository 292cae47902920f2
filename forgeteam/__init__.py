"""forgeteam — declarative team reconciliation for Forgejo and Gitea."""

__version__ = "0.1.0"
