"""Small helpers for normalizing user-entered card text."""


def split_tags(raw: str | None, sep: str = ";") -> list[str]:
    """
    Split a delimited tag string into a list, dropping blanks.

    >>> split_tags(" noun; animals ;;")
    ['noun', 'animals']
    """
    if not raw:
        return []
    return [t.strip() for t in raw.split(sep) if t.strip()]


def dedupe_tags(tags: list[str]) -> list[str]:
    """Remove duplicate tags, keeping first occurrence order."""
    return list(dict.fromkeys(tags))
