"""HTTP helpers shared by the fetchers and image downloads."""

from __future__ import annotations

from typing import Optional

import requests

from megafone.errors import FetchError


def http_session(accept: Optional[str] = None) -> requests.Session:
    """Create a plain requests session.

    Requests block until the server answers: no timeout, no retries and no
    user-agent override are configured.
    """

    session = requests.Session()
    if accept:
        session.headers["Accept"] = accept
    return session


def get_ok(session: requests.Session, url: str, what: str = "request") -> requests.Response:
    """GET ``url`` and require a 200, raising ``FetchError`` otherwise."""
    try:
        response = session.get(url)
    except requests.RequestException as e:
        raise FetchError(f"{what} failed for {url}: {e}") from e
    if response.status_code != 200:
        raise FetchError(
            f"{what} failed for {url}: HTTP {response.status_code}",
            status=response.status_code,
        )
    return response


def json_body(response: requests.Response, what: str = "request") -> dict:
    """Decoded JSON object body; anything else is a ``FetchError``."""
    try:
        data = response.json()
    except ValueError as e:
        raise FetchError(f"{what} returned a non-JSON body: {e}", status=response.status_code) from e
    if not isinstance(data, dict):
        raise FetchError(f"{what} returned unexpected JSON ({type(data).__name__})", status=response.status_code)
    return data
