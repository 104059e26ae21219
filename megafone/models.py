"""Pydantic models shared across a generation run."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    """Immutable base forbidding silent data loss."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class GitHubRepo(FrozenModel):
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


class WebsiteURL(FrozenModel):
    url: str


class ResearchTopic(FrozenModel):
    text: str


Topic = Union[GitHubRepo, WebsiteURL, ResearchTopic]


class TemplateSelection(str, Enum):
    GITHUB_PROJECT = "github-project"
    NEWS_ARTICLE = "news-article"
    TECHNICAL_ARTICLE = "technical-article"
    RESEARCH_TOPIC = "research-topic"


class ImageOrigin(str, Enum):
    USER_SUPPLIED = "user-supplied"
    MARKDOWN_README = "markdown-readme"
    OG_META = "og-meta"
    TWITTER_META = "twitter-meta"
    HERO_CLASS = "hero-class"
    ARTICLE_IMG = "article-img"
    GENERATED = "generated"


class RepoMetadata(FrozenModel):
    """Subset of the GitHub repository payload used in prompts."""

    full_name: str
    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = Field(default=0, ge=0)
    html_url: str = ""


class SourceMaterial(FrozenModel):
    title: str = ""
    body: str = ""
    raw_html: Optional[str] = Field(default=None, description="Kept for website mode only")


class ImageCandidate(FrozenModel):
    url: str
    origin: ImageOrigin


class StoredImage(FrozenModel):
    filename: str
    local_path: Path

    @property
    def site_path(self) -> str:
        """Absolute site-root path used in front matter."""
        return f"/images/site/{self.filename}"


class GeneratedPost(FrozenModel):
    markdown_body: str
    filename: str


class RunResult(FrozenModel):
    post: GeneratedPost
    template: TemplateSelection
    post_path: Optional[Path] = None
    image: Optional[StoredImage] = None
