"""Explicit user preferences: settings a signed-in user stores on the server.

Unlike the behaviour profile these are never inferred: theme, layout, sort
order and the favorite-genre list are whatever the user last chose.  The
favorite-genre list also feeds genre highlighting in personalization.
"""

import logging
from typing import Optional
from uuid import UUID

from bookburst.domain.entities import UserPreference
from bookburst.domain.personalization import MAX_RECENT_BOOKS, push_recent
from bookburst.domain.repositories import IUserPreferenceRepository
from bookburst.domain.services import IPreferenceService

logger = logging.getLogger(__name__)

THEMES = ("light", "dark", "system")
VIEW_MODES = ("grid", "list")
SORT_ORDERS = ("title", "author", "date_added", "rating")


class PreferenceService(IPreferenceService):

    def __init__(self, preference_repo: IUserPreferenceRepository):
        self.preference_repo = preference_repo

    async def get_preferences(self, user_id: UUID) -> UserPreference:
        """Return (or lazily create) the user's preferences."""
        return await self.preference_repo.get_or_create(user_id)

    async def update_preferences(
        self,
        user_id: UUID,
        *,
        theme: Optional[str] = None,
        last_active_tab: Optional[str] = None,
        favorite_genres: Optional[list[str]] = None,
        view_mode: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> UserPreference:
        """Merge-update preference fields (only supplied fields change)."""
        pref = await self.preference_repo.get_or_create(user_id)

        if theme is not None:
            if theme not in THEMES:
                raise ValueError("theme must be one of: light, dark, system")
            pref.theme = theme
        if view_mode is not None:
            if view_mode not in VIEW_MODES:
                raise ValueError("view_mode must be one of: grid, list")
            pref.view_mode = view_mode
        if sort_order is not None:
            if sort_order not in SORT_ORDERS:
                raise ValueError("sort_order must be one of: title, author, date_added, rating")
            pref.sort_order = sort_order
        if last_active_tab is not None:
            pref.last_active_tab = last_active_tab
        if favorite_genres is not None:
            # keep first occurrence, drop blanks
            seen: list[str] = []
            for genre in favorite_genres:
                genre = genre.strip()
                if genre and genre not in seen:
                    seen.append(genre)
            pref.favorite_genres = seen

        return await self.preference_repo.update(pref)

    async def add_reading_time(self, user_id: UUID, seconds: int) -> UserPreference:
        if seconds < 0:
            raise ValueError("Reading time must not be negative")
        pref = await self.preference_repo.get_or_create(user_id)
        pref.reading_time += seconds
        logger.debug("User %s read for %ds more (total=%ds)", user_id, seconds, pref.reading_time)
        return await self.preference_repo.update(pref)

    async def add_recently_viewed(self, user_id: UUID, book_id: UUID) -> UserPreference:
        pref = await self.preference_repo.get_or_create(user_id)
        pref.recently_viewed_books = push_recent(
            pref.recently_viewed_books, str(book_id), MAX_RECENT_BOOKS
        )
        return await self.preference_repo.update(pref)
