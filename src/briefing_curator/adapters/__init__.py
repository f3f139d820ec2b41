"""Adapters for collaborators outside the curation core."""
