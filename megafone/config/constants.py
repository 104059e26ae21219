"""Configuration constants for the content pipeline."""

# Substrings that mark a bare string as a website address
WEBSITE_TLDS = (".com", ".org", ".net", ".io", ".dev", ".co")

# Checked in order: news first, technical second
NEWS_KEYWORDS = (
    "nytimes.com",
    "washingtonpost.com",
    "theguardian.com",
    "bbc.co",
    "cnn.com",
    "reuters.com",
    "apnews.com",
    "bloomberg.com",
    "techcrunch.com",
    "theverge.com",
    "arstechnica.com",
    "wired.com",
    "engadget.com",
    "zdnet.com",
    "news.ycombinator.com",
    "/news/",
    "/article/",
    "/story/",
)

TECHNICAL_KEYWORDS = (
    "dev.to",
    "medium.com",
    "hashnode",
    "stackoverflow.com",
    "freecodecamp.org",
    "css-tricks.com",
    "smashingmagazine.com",
    "realpython.com",
    "github.io",
    "readthedocs",
    "docs.",
    "/tutorial/",
    "/guide/",
    "/blog/",
)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")

IMAGE_BLACKLIST = ("1x1", "pixel", "icon", "logo", "share", "social")

HERO_CLASS_HINTS = ("hero", "featured", "main")

CONTENT_TYPE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}

RAW_GITHUB_BASE = "https://raw.githubusercontent.com"
GITHUB_API = "https://api.github.com"
README_BRANCH = "main"

MAX_IMAGE_CHOICES = 5
FILENAME_MAX_LEN = 50

# Site layout, relative to the site root
POSTS_DIR = ("content", "posts", "en")
IMAGES_DIR = ("assets", "images", "site")
LOG_FILE = ("logs", "generation.log")
HERO_URL_PREFIX = "/images/site/"

DEFAULT_CONFIG = {
    "model": "gpt-4o-mini",
    "image_model": "dall-e-3",
    "image_size": "1792x1024",
    "templates_dir": None,
    "research_max_tokens": 4000,
    "research_max_chars": 12000,
    "draft_temperature": 0.7,
}
