"""HTTP layer (FastAPI)."""

from spendwise.api.app import create_app

__all__ = ["create_app"]
