"""Topic and keyword extraction."""

import re
from typing import Iterable, Optional

# Korean particles and conjunctions that carry no story identity.
TITLE_STOP_WORDS = frozenset({
    "및", "의", "이", "가", "을", "를", "은", "는", "에", "에서",
    "으로", "로", "과", "와", "이나", "또는", "하지만", "그리고",
    "하여", "에서의", "에의", "위해", "위한", "대한", "관한",
})

MIN_KEYWORD_LENGTH = 2

_TITLE_SEPARATORS = re.compile(r"[\s,·\-—]+")
# Keep Hangul syllables, CJK ideographs, ASCII letters and digits.
_NON_KEYWORD_CHARS = re.compile(r"[^\uac00-\ud7a3\u4e00-\u9fffa-zA-Z0-9]")


def normalize_topic(tag: str) -> Optional[str]:
    """Trim and case-fold a tag. Returns None for blank tags."""
    topic = tag.strip().casefold()
    return topic or None


def extract_topics(tags: Iterable[str]) -> list[str]:
    """Derive profile topics from raw tags.

    Tags are trimmed and case-folded, blanks are dropped and duplicates
    removed while keeping first-seen order. Applying it to its own output
    returns the same list.
    """
    seen: set[str] = set()
    topics = []

    for tag in tags:
        topic = normalize_topic(tag)
        if topic is None or topic in seen:
            continue
        seen.add(topic)
        topics.append(topic)

    return topics


def extract_title_keywords(title: str) -> list[str]:
    """Extract story keywords from a (possibly Korean) headline."""
    keywords = []
    for word in _TITLE_SEPARATORS.split(title):
        word = _NON_KEYWORD_CHARS.sub("", word)
        if len(word) >= MIN_KEYWORD_LENGTH and word not in TITLE_STOP_WORDS:
            keywords.append(word)
    return keywords
