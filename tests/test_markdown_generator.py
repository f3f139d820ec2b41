"""Tests for markdown digest rendering."""

from datetime import date

from briefing_curator.adapters.digest import MarkdownDigestGenerator
from briefing_curator.core import Category, ContentItem, Digest, DigestEntry, DigestSection, Tags


def make_entry(item_id: str, category: Category, section=DigestSection.MAIN, **kwargs) -> DigestEntry:
    item = ContentItem(
        id=item_id,
        category=category,
        title=f"Headline {item_id}",
        tags=Tags.of(["ai", "chips"]),
        score=0.82,
        why_important="Shifts the chip supply outlook.",
    )
    return DigestEntry(item=item, section=section, reason=kwargs.pop("reason", "tech #1"), **kwargs)


def test_empty_digest() -> None:
    """Test empty digest renders a short notice."""
    markdown = MarkdownDigestGenerator().generate(Digest(), date(2026, 3, 9))
    
    assert markdown == "# Briefing for 2026-03-09\n\nNothing to brief today."


def test_digest_sections() -> None:
    """Test entries are grouped by category with exploration last."""
    digest = Digest(
        main=[make_entry("t1", Category.TECH), make_entry("w1", Category.WORLD, reason="world #1")],
        exploration=make_entry("x1", Category.EXPLORATION, section=DigestSection.EXPLORATION, reason="exploration"),
    )
    
    markdown = MarkdownDigestGenerator().generate(digest, date(2026, 3, 9))
    
    assert "Items: 3" in markdown
    assert markdown.index("## 💻 Tech") < markdown.index("## 🌍 World") < markdown.index("## 🎲 Exploration")
    assert "## 🎭 Culture" not in markdown
    assert "### Headline t1" in markdown
    assert "**Score:** 82% · tech #1" in markdown
    assert "> Shifts the chip supply outlook." in markdown
    assert "*ai | chips*" in markdown


def test_following_entry_is_collapsed() -> None:
    """Test ongoing stories render as a single line."""
    digest = Digest(main=[make_entry("w1", Category.WORLD, reason="world #1", is_following=True)])
    
    markdown = MarkdownDigestGenerator().generate(digest, date(2026, 3, 9))
    
    assert "- ↻ *Still following:* Headline w1" in markdown
    assert "### Headline w1" not in markdown
