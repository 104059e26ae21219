"""Regex-based scraping helpers kept behind a narrow interface."""

from .images import extract_best_image, extract_readme_images
from .text import extract_title, strip_tags

__all__ = ["extract_best_image", "extract_readme_images", "extract_title", "strip_tags"]
