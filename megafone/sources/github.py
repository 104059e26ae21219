"""GitHub REST fetcher: repository metadata and README."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional, Tuple

from megafone.config.constants import GITHUB_API
from megafone.errors import FetchError
from megafone.models import GitHubRepo, RepoMetadata, SourceMaterial
from megafone.net import get_ok, http_session, json_body

logger = logging.getLogger(__name__)


class GitHubSource:
    def __init__(self, session=None, log: Optional[logging.Logger] = None):
        self.session = session or http_session(accept="application/vnd.github.v3+json")
        self.log = log or logger

    def _repo_api(self, repo: GitHubRepo, suffix: str = "") -> str:
        return f"{GITHUB_API}/repos/{repo.owner}/{repo.name}{suffix}"

    def fetch_metadata(self, repo: GitHubRepo) -> RepoMetadata:
        response = get_ok(self.session, self._repo_api(repo), what="repository fetch")
        js = json_body(response, what="repository fetch")
        try:
            stars = max(int(js.get("stargazers_count") or 0), 0)
        except (TypeError, ValueError) as e:
            raise FetchError(f"repository fetch returned bad stargazers_count: {e}") from e
        return RepoMetadata(
            full_name=js.get("full_name") or repo.slug,
            name=js.get("name") or repo.name,
            description=js.get("description"),
            language=js.get("language"),
            stars=stars,
            html_url=js.get("html_url") or f"https://github.com/{repo.slug}",
        )

    def fetch_readme(self, repo: GitHubRepo) -> str:
        response = get_ok(self.session, self._repo_api(repo, "/readme"), what="README fetch")
        js = json_body(response, what="README fetch")
        content = js.get("content") or ""
        if js.get("encoding", "base64") != "base64":
            return content
        try:
            return base64.b64decode(content).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            raise FetchError(f"README for {repo.slug} is not valid base64: {e}") from e

    def fetch(self, repo: GitHubRepo) -> Tuple[RepoMetadata, SourceMaterial]:
        """Metadata failure is fatal; a README failure degrades to an empty body."""
        self.log.info("Fetching repository: %s", repo.slug)
        meta = self.fetch_metadata(repo)

        self.log.info("Reading README...")
        try:
            readme = self.fetch_readme(repo)
        except FetchError as e:
            self.log.warning("README unavailable for %s, continuing without it: %s", repo.slug, e)
            readme = ""

        return meta, SourceMaterial(title=meta.full_name, body=readme)


def repo_context(meta: RepoMetadata, readme: str) -> str:
    return (
        f"Repository: {meta.full_name}\n"
        f"Description: {meta.description or ''}\n"
        f"Language: {meta.language or ''}\n"
        f"Stars: {meta.stars}\n"
        f"URL: {meta.html_url}\n"
        f"\nREADME Content:\n{readme}\n"
    )
