"""Digest renderers."""

from briefing_curator.adapters.digest.markdown_generator import MarkdownDigestGenerator

__all__ = ["MarkdownDigestGenerator"]
