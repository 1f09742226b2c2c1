"""
smartpreload.topics — Keyword-table topic extraction.

A message carries a topic when any of that topic's keywords appears in it
as a case-insensitive substring. No state, no errors: anything that is not
text simply has no topics.
"""

import re

from smartpreload.config import TOPIC_KEYWORDS


def build_topic_patterns(keywords: dict[str, list[str]]) -> dict[str, re.Pattern]:
    """Compile one alternation regex per topic."""
    compiled = {}
    for topic, kw_list in keywords.items():
        escaped = [re.escape(kw.lower()) for kw in kw_list if kw]
        if not escaped:
            continue
        compiled[topic] = re.compile("|".join(escaped))
    return compiled


_DEFAULT_PATTERNS: dict[str, re.Pattern] = build_topic_patterns(TOPIC_KEYWORDS)


def extract_topics(message, keywords: dict[str, list[str]] | None = None) -> set[str]:
    """Return the set of topics whose keywords occur in ``message``."""
    if not isinstance(message, str) or not message:
        return set()

    patterns = _DEFAULT_PATTERNS if keywords is None else build_topic_patterns(keywords)
    text = message.lower()
    return {topic for topic, pattern in patterns.items() if pattern.search(text)}
