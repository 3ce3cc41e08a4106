"""Visibility rules for shelf entries and the reviews written on them."""

from typing import Any, Iterable, Optional
from uuid import UUID

from bookburst.domain.entities import UserBook


def is_visible(entry: Any, viewer_id: Optional[UUID], owner_id: Optional[UUID]) -> bool:
    """Return True if ``viewer_id`` may see ``entry`` owned by ``owner_id``.

    The owner sees every entry; anyone else only sees public ones.  Anything
    that does not look like an entry with a boolean ``is_public`` is hidden.
    """
    if entry is None or owner_id is None:
        return False
    if viewer_id is not None and viewer_id == owner_id:
        return True
    return getattr(entry, "is_public", None) is True


def filter_visible(entries: Iterable[UserBook], viewer_id: Optional[UUID]) -> list[UserBook]:
    """Keep the entries ``viewer_id`` may see, in their original order."""
    return [e for e in entries if is_visible(e, viewer_id, getattr(e, "user_id", None))]
