"""Single generation run: classify, fetch, draft, name, image, write."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from megafone.classifier import classify, describe, select_template
from megafone.config.settings import Settings, load_settings, resolve_api_key, resolve_site_path
from megafone.drafting import build_draft_prompt, choose_filename, generate_draft, sanitize_filename
from megafone.errors import ConfigError
from megafone.extract import extract_best_image, extract_readme_images
from megafone.images import ImagePipeline, select_best_image, set_front_matter_hero
from megafone.llm import LLMClient
from megafone.models import (
    GeneratedPost,
    GitHubRepo,
    ResearchTopic,
    RunResult,
    SourceMaterial,
    StoredImage,
    Topic,
    WebsiteURL,
)
from megafone.net import http_session
from megafone.prompt_loader import load_template
from megafone.sources import research, website
from megafone.sources.github import GitHubSource, repo_context
from megafone.utils import SUCCESS, attach_log_file, today_iso
from megafone.writer import log_generation, log_path, parse_tags, print_dry_run, write_post


@dataclass
class GenerateOptions:
    topic: str
    site_source: Optional[str] = None
    image: Optional[str] = None
    tags: Optional[str] = None
    prompt: Optional[str] = None
    dry_run: bool = False
    model: Optional[str] = None
    openai_key: Optional[str] = None
    config: Optional[str] = None


@dataclass
class _Gathered:
    material: SourceMaterial
    context: str
    base_name: str
    image: Optional[StoredImage] = None


class Generator:
    """Runs one generation; collaborators are injected so tests can fake them."""

    def __init__(self, opts: GenerateOptions, settings: Settings, site_root: Path,
                 llm: LLMClient, log: logging.Logger, session=None, github: Optional[GitHubSource] = None):
        self.opts = opts
        self.settings = settings
        self.site_root = site_root
        self.llm = llm
        self.log = log
        self.session = session or http_session()
        self.github = github or GitHubSource(log=log)
        self.images = ImagePipeline(
            site_root,
            llm,
            image_model=settings.image_model,
            image_size=settings.image_size,
            dry_run=opts.dry_run,
            session=self.session,
            log=log,
        )

    # ---------- per topic kind ----------

    def _gather_github(self, repo: GitHubRepo) -> _Gathered:
        meta, material = self.github.fetch(repo)
        gathered = _Gathered(material, repo_context(meta, material.body), repo.name.lower())

        if self.opts.image:
            self.log.info("Processing provided image: %s", self.opts.image)
            gathered.image = self.images.store_local(self.opts.image, gathered.base_name)
            return gathered

        self.log.info("Searching for hero image in repository...")
        candidates = extract_readme_images(material.body, repo.owner, repo.name)
        if not candidates:
            self.log.info("No suitable image found in repository README")
            return gathered
        self.log.info("Found %d images in README", len(candidates))
        chosen = select_best_image(self.llm, candidates, log=self.log)
        self.log.info("Found image: %s", chosen.url)
        gathered.image = self.images.download(chosen, gathered.base_name)
        return gathered

    def _gather_website(self, site: WebsiteURL) -> _Gathered:
        material = website.fetch(site, session=self.session, log=self.log)
        base = sanitize_filename(material.title) or "post"
        gathered = _Gathered(material, website.website_context(site, material), base)

        if self.opts.image:
            self.log.info("Processing provided image: %s", self.opts.image)
            gathered.image = self.images.store_local(self.opts.image, base)
            return gathered

        candidate = extract_best_image(material.raw_html or "", site.url)
        if candidate:
            self.log.info("Found %s image: %s", candidate.origin.value, candidate.url)
            gathered.image = self.images.download(candidate, base)
        return gathered

    def _gather_research(self, topic: ResearchTopic) -> _Gathered:
        material = research.fetch(
            topic,
            self.llm,
            max_tokens=self.settings.research_max_tokens,
            max_chars=self.settings.research_max_chars,
            log=self.log,
        )
        base = sanitize_filename(topic.text) or "post"
        gathered = _Gathered(material, research.research_context(topic, material), base)
        if self.opts.image:
            self.log.info("Processing provided image: %s", self.opts.image)
            gathered.image = self.images.store_local(self.opts.image, base)
        return gathered

    def _gather(self, topic: Topic) -> _Gathered:
        if isinstance(topic, GitHubRepo):
            return self._gather_github(topic)
        if isinstance(topic, WebsiteURL):
            return self._gather_website(topic)
        if isinstance(topic, ResearchTopic):
            return self._gather_research(topic)
        raise TypeError(f"unsupported topic kind: {type(topic).__name__}")

    # ---------- run ----------

    def run(self, topic: Topic) -> RunResult:
        selection = select_template(topic)
        template = load_template(selection, self.opts.prompt, self.settings.templates_dir)
        self.log.info("Topic is a %s, template %s (%s)", describe(topic), selection.value, template.source)

        t0 = time.monotonic()
        gathered = self._gather(topic)
        self.log.info("source gathered took_ms=%d", int((time.monotonic() - t0) * 1000))

        image = gathered.image
        prompt = build_draft_prompt(
            template,
            topic,
            gathered.context,
            hero_image=image.filename if image else None,
            tags=self.opts.tags or "",
            date=today_iso(),
        )

        self.log.info("Generating blog post with OpenAI (%s)...", self.llm.model)
        t1 = time.monotonic()
        content = generate_draft(self.llm, template, prompt, temperature=self.settings.draft_temperature)
        self.log.info("draft generated chars=%d took_ms=%d", len(content), int((time.monotonic() - t1) * 1000))

        filename = choose_filename(self.llm, content, topic, gathered.material, log=self.log)
        self.log.info("Generated filename: %s", filename)

        if image is None and not isinstance(topic, GitHubRepo):
            image = self.images.generate(content, filename)
            if image:
                content = set_front_matter_hero(content, image.site_path)

        post = GeneratedPost(markdown_body=content, filename=filename)

        if self.opts.dry_run:
            self.log.info("Dry run mode - not writing files")
            print_dry_run(post.markdown_body)
            return RunResult(post=post, template=selection, image=image)

        path = write_post(self.site_root, post)
        self.log.log(SUCCESS, "Post created: %s", path)
        if image:
            self.log.log(SUCCESS, "Image stored: assets/images/site/%s", image.filename)

        log_generation(
            self.log,
            self.opts.topic,
            path,
            image.local_path if image else None,
            parse_tags(self.opts.tags),
        )
        return RunResult(post=post, template=selection, post_path=path, image=image)


def run_generate(opts: GenerateOptions, log: logging.Logger, llm: Optional[LLMClient] = None,
                 session=None, github: Optional[GitHubSource] = None) -> RunResult:
    """Validate everything local first, then run the network-bound pipeline."""
    site_root = resolve_site_path(opts.site_source)
    attach_log_file(log, log_path(site_root))

    run_id = uuid.uuid4().hex[:8]
    log.info("=== run start id=%s topic=%s ===", run_id, opts.topic)
    try:
        log.info("Using Hugo site at: %s", site_root)
        settings = load_settings(opts.config, {"model": opts.model})
        api_key = resolve_api_key(opts.openai_key)
        topic = classify(opts.topic)
        if opts.image and not Path(opts.image).expanduser().is_file():
            raise ConfigError(f"image not found: {opts.image}")

        llm = llm or LLMClient(api_key, settings.model, log=log)
        generator = Generator(opts, settings, site_root, llm, log, session=session, github=github)
        return generator.run(topic)
    finally:
        log.info("=== run end id=%s ===", run_id)
