"""Output writer: the post file and the per-run GENERATION log line."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from megafone.config.constants import LOG_FILE, POSTS_DIR
from megafone.errors import OutputError
from megafone.models import GeneratedPost


def post_path(site_root: Path, filename: str) -> Path:
    return Path(site_root).joinpath(*POSTS_DIR) / f"{filename}.md"


def log_path(site_root: Path) -> Path:
    return Path(site_root).joinpath(*LOG_FILE)


def write_post(site_root: Path, post: GeneratedPost) -> Path:
    """Write the post, overwriting any earlier file with the same name.

    The body always ends with exactly one newline.
    """
    path = post_path(site_root, post.filename)
    body = post.markdown_body.rstrip("\n") + "\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"failed to write post {path}: {e}") from e
    return path


def parse_tags(tags: Optional[str]) -> List[str]:
    return [t.strip() for t in (tags or "").split(",") if t.strip()]


def log_generation(log: logging.Logger, topic: str, written_post: Path,
                   image_path: Optional[Path], tags: List[str]) -> None:
    log.info(
        "GENERATION: topic=%s, post=%s, image=%s, tags=%s",
        topic, written_post, image_path or "none", tags,
    )


def print_dry_run(content: str) -> None:
    rule = "=" * 80
    print("\n" + rule)
    print("DRY RUN - Generated Content:")
    print(rule)
    print(content)
    print(rule)
