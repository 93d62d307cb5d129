"""Blogit turns a directory of Markdown documents in a GitHub repository into blog articles."""

__version__ = "0.1.0"
