"""Networking utilities for blocking HTTP access."""

from .http import get_ok, http_session, json_body

__all__ = ["get_ok", "http_session", "json_body"]
