"""State store adapters."""

from briefing_curator.adapters.storage.yaml_store import YamlStateStore, load_candidates

__all__ = ["YamlStateStore", "load_candidates"]
