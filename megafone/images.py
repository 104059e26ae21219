"""Hero image pipeline: user file, auto-detected download, or generation.

Only the user-supplied path can fail the run (and that is checked before
any network call). Download, selection and generation failures are logged
and the post is written without a hero image.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

import openai
import yaml

from megafone.config.constants import CONTENT_TYPE_EXTENSIONS, IMAGE_EXTENSIONS, IMAGES_DIR, MAX_IMAGE_CHOICES
from megafone.errors import ConfigError, EmptyGenerationError, FetchError
from megafone.llm import LLMClient
from megafone.models import ImageCandidate, StoredImage
from megafone.net import get_ok, http_session
from megafone.prompt_loader import render_prompt
from megafone.utils import SUCCESS, redact_secrets

logger = logging.getLogger(__name__)

_YAML_FM_RE = re.compile(r"\A---[ \t]*\n(.*?\n)?---[ \t]*(?:\n|\Z)", re.DOTALL)
_TOML_FM_RE = re.compile(r"\A\+\+\+[ \t]*\n(.*?\n)?\+\+\+[ \t]*(?:\n|\Z)", re.DOTALL)
_NUMBER_RE = re.compile(r"\d+")


# ---------- Selection ----------

def select_best_image(llm: LLMClient, candidates: List[ImageCandidate],
                      log: Optional[logging.Logger] = None) -> ImageCandidate:
    """Ask the LLM to pick among the first five; defaults to the first."""
    log = log or logger
    if not candidates:
        raise ValueError("no image candidates")
    if len(candidates) == 1:
        return candidates[0]

    shortlist = candidates[:MAX_IMAGE_CHOICES]
    system, task = render_prompt("image_select", urls=[c.url for c in shortlist])
    try:
        answer = llm.chat(system, task, temperature=0.3, max_tokens=5)
    except (openai.OpenAIError, EmptyGenerationError) as e:
        log.error("Failed to use AI for image selection: %s", redact_secrets(str(e)))
        return shortlist[0]

    m = _NUMBER_RE.search(answer)
    index = int(m.group(0)) if m else 0
    if not 1 <= index <= len(shortlist):
        log.info("Unusable image choice %r, using the first image", answer)
        return shortlist[0]
    return shortlist[index - 1]


# ---------- Front matter ----------

def _split_front_matter(markdown: str):
    for pattern, kind in ((_YAML_FM_RE, "yaml"), (_TOML_FM_RE, "toml")):
        m = pattern.match(markdown)
        if m:
            return kind, m.group(1) or "", markdown[m.end():]
    return None, "", markdown


def _unquote(value: str) -> str:
    return value.strip().strip("\"'").strip()


def front_matter_fields(markdown: str) -> dict:
    """Return ``title`` and ``description`` from YAML or TOML front matter."""
    kind, block, _ = _split_front_matter(markdown)
    fields = {}
    if kind == "yaml":
        try:
            data = yaml.safe_load(block) or {}
        except yaml.YAMLError:
            data = {}
        if isinstance(data, dict):
            fields = {k: str(data[k]) for k in ("title", "description") if data.get(k)}
    if kind and not fields:
        for key in ("title", "description"):
            m = re.search(rf"^{key}\s*[:=]\s*(.+)$", block, re.MULTILINE)
            if m:
                fields[key] = _unquote(m.group(1))
    return fields


def set_front_matter_hero(markdown: str, hero_path: str) -> str:
    """Insert or overwrite ``hero`` in the front matter, creating it if absent."""
    kind, block, body = _split_front_matter(markdown)
    if kind == "toml":
        line = f'hero = "{hero_path}"'
        pattern = re.compile(r"^hero\s*=.*$", re.MULTILINE)
        fence = "+++"
    else:
        line = f"hero: {hero_path}"
        pattern = re.compile(r"^hero\s*:.*$", re.MULTILINE)
        fence = "---"

    if pattern.search(block):
        block = pattern.sub(line, block, count=1)
    else:
        block = block + line + "\n"

    if kind is None:
        return f"{fence}\n{block}{fence}\n\n{body}"
    return f"{fence}\n{block}{fence}\n{body}"


# ---------- Storage ----------

def extension_for(url: str, content_type: Optional[str] = None) -> str:
    """URL path suffix, then Content-Type, then ``.jpg``."""
    suffix = Path(urlparse(url or "").path).suffix.lower()
    if suffix in IMAGE_EXTENSIONS or suffix == ".svg":
        return suffix
    mime = (content_type or "").split(";")[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(mime, ".jpg")


class ImagePipeline:
    def __init__(self, site_root: Path, llm: LLMClient, image_model: str, image_size: str,
                 dry_run: bool = False, session=None, log: Optional[logging.Logger] = None):
        self.images_dir = Path(site_root).joinpath(*IMAGES_DIR)
        self.llm = llm
        self.image_model = image_model
        self.image_size = image_size
        self.dry_run = dry_run
        self.session = session or http_session()
        self.log = log or logger

    def _target(self, filename: str) -> Path:
        return self.images_dir / filename

    def _write(self, filename: str, data: bytes) -> StoredImage:
        dest = self._target(filename)
        if self.dry_run:
            self.log.info("Dry run - not writing image %s", dest)
        else:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(data)
        return StoredImage(filename=filename, local_path=dest)

    def store_local(self, src_path: str, base_name: str) -> StoredImage:
        """Copy a user-supplied image byte-for-byte; errors are fatal."""
        src = Path(src_path).expanduser()
        if not src.is_file():
            raise ConfigError(f"image not found: {src}")
        filename = f"{base_name}{src.suffix.lower()}"
        dest = self._target(filename)
        if self.dry_run:
            self.log.info("Dry run - not copying image to %s", dest)
            return StoredImage(filename=filename, local_path=dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dest)
        except OSError as e:
            raise ConfigError(f"failed to process image {src}: {e}") from e
        return StoredImage(filename=filename, local_path=dest)

    def download(self, candidate: ImageCandidate, base_name: str) -> Optional[StoredImage]:
        """Download an auto-detected image; ``None`` on failure."""
        if self.dry_run:
            filename = f"{base_name}{extension_for(candidate.url)}"
            self.log.info("Dry run - not downloading %s", candidate.url)
            return StoredImage(filename=filename, local_path=self._target(filename))
        try:
            response = get_ok(self.session, candidate.url, what="image download")
            filename = f"{base_name}{extension_for(candidate.url, response.headers.get('Content-Type'))}"
            stored = self._write(filename, response.content)
        except (FetchError, OSError) as e:
            self.log.error("Failed to download image: %s", e)
            return None
        self.log.log(SUCCESS, "Downloaded and saved image: %s", stored.filename)
        return stored

    def generate(self, markdown: str, base_name: str) -> Optional[StoredImage]:
        """Generate a hero from the draft's title/description; ``None`` on failure."""
        if self.dry_run:
            self.log.info("Dry run - skipping hero image generation")
            return None

        fields = front_matter_fields(markdown)
        _, prompt = render_prompt(
            "hero_image",
            title=fields.get("title") or base_name.replace("-", " "),
            description=fields.get("description", ""),
        )
        self.log.info("Generating hero image with %s", self.image_model)
        try:
            result = self.llm.generate_image(prompt, model=self.image_model, size=self.image_size)
            if isinstance(result, bytes):
                data = result
            else:
                data = get_ok(self.session, result, what="generated image download").content
            stored = self._write(f"{base_name}.png", data)
        except (openai.OpenAIError, EmptyGenerationError, FetchError, OSError) as e:
            self.log.error("Hero image generation failed: %s", redact_secrets(str(e)))
            return None
        self.log.log(SUCCESS, "Generated hero image: %s", stored.filename)
        return stored
