import re
from typing import List

# Handles are ASCII word characters; a non-ASCII letter ends the handle.
MENTION_PATTERN = re.compile(r"@(\w+)", re.ASCII)


def extract_mentions(content: str) -> List[str]:
    """Return handles mentioned in ``content``, deduplicated in first-seen order."""
    return list(dict.fromkeys(MENTION_PATTERN.findall(content or "")))
