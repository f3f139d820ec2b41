"""Curation and throttling core for a personal content briefing assistant."""
