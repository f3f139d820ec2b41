"""Markdown digest generator."""

from datetime import date

from briefing_curator.core import Category, Digest, DigestEntry

CATEGORY_HEADINGS = {
    Category.TECH: "💻 Tech",
    Category.WORLD: "🌍 World",
    Category.CULTURE: "🎭 Culture",
    Category.REGIONAL: "🏙️ Regional",
}


class MarkdownDigestGenerator:
    """Render a digest as markdown."""
    
    def generate(self, digest: Digest, digest_date: date) -> str:
        """Generate markdown digest."""
        if not digest.entries:
            return f"# Briefing for {digest_date.isoformat()}\n\nNothing to brief today."
        
        lines = [
            f"# Briefing for {digest_date.isoformat()}",
            "",
            f"Items: {len(digest)}",
            "",
        ]
        
        for category, heading in CATEGORY_HEADINGS.items():
            entries = [e for e in digest.main if e.item.category is category]
            if not entries:
                continue
            lines.extend([f"## {heading}", ""])
            for entry in entries:
                lines.extend(self._format_entry(entry))
        
        if digest.exploration is not None:
            lines.extend(["## 🎲 Exploration", ""])
            lines.extend(self._format_entry(digest.exploration))
        
        return "\n".join(lines)
    
    def _format_entry(self, entry: DigestEntry) -> list[str]:
        """Format single digest entry."""
        item = entry.item
        
        # Ongoing stories collapse to a single line.
        if entry.is_following:
            return [f"- ↻ *Still following:* {item.title}", ""]
        
        lines = [
            f"### {item.title}",
            "",
            f"**Score:** {item.ranking_score:.0%} · {entry.reason}",
            "",
        ]
        
        if item.why_important:
            lines.extend([f"> {item.why_important}", ""])
        
        if item.tags.values:
            lines.append(f"*{' | '.join(item.tags.values)}*")
            lines.append("")
        
        lines.append("---")
        lines.append("")
        
        return lines
