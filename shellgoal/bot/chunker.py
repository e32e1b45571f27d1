"""Splitting long transcripts into message-sized segments."""

from config.settings import settings


def chunk_text(text: str, limit: int | None = None) -> list[str]:
    """
    Split text into consecutive segments of at most ``limit`` characters.

    The segments join back to exactly ``text``; empty text yields no segments.
    """
    limit = limit if limit is not None else settings.max_message_length
    if limit < 1:
        raise ValueError("limit must be at least 1")
    return [text[start : start + limit] for start in range(0, len(text), limit)]
