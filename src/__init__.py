"""contentkit — content syndication, SEO analysis and lifecycle management."""

__version__ = "0.1.0"
