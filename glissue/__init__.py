"""glissue: create GitLab issues from templates in your editor."""

__version__ = "0.1.0"
