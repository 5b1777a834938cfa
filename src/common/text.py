"""Text helpers shared by the renderer and publisher."""

from __future__ import annotations

import unicodedata

# Characters kept in URL slugs besides letters and digits
_SLUG_KEEP = ("-", "_", "+")


def slugify(text: str, max_length: int = 80) -> str:
    """Turn a tag or title into a URL path segment.

    "Template Metaprogramming" -> "template-metaprogramming",
    "C++" -> "c++".

    Args:
        text: Raw text
        max_length: Longest slug returned

    Returns:
        Lower-case slug; empty if nothing usable remains
    """
    text = unicodedata.normalize("NFKC", text).strip().lower()
    safe = text.replace(" ", "-").replace("/", "-")
    safe = "".join(c for c in safe if c.isalnum() or c in _SLUG_KEEP)
    while "--" in safe:
        safe = safe.replace("--", "-")
    return safe.strip("-")[:max_length]
