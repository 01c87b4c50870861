"""HTTP API for floor tablets and dashboards."""

from .app import create_app

__all__ = ["create_app"]
