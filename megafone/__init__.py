"""megafone: generate Hugo blog posts from repositories, websites and topics."""

__version__ = "0.1.0"
