"""Personalization service: loads, tracks, and persists behaviour profiles.

The scoring itself lives in ``bookburst.domain.personalization`` and is pure.
This service owns the I/O around it:

  load     → consent decides whether any store is read at all
  track    → mutate the context's profile, then persist best-effort
  rank     → fetch the catalog and hand it to the ranker

Storage
-------
Every client has a behaviour profile in the client-local cache (Redis, keyed
by the client cookie, 30-day expiry).  Signed-in users additionally get a
durable copy in Postgres, which wins over the cache when both exist.

Store failures are logged and never fail the request: a book page must still
load when Redis is down.  If a profile could not be read, the request works
from what it has but writes nothing back, so the stored counts are not
replaced by a partial copy.
"""

import logging
from typing import Optional
from uuid import UUID

from bookburst.domain.entities import BehaviorProfile, Book
from bookburst.domain.personalization import (
    AffinityScorer,
    PersonalizationContext,
    RecommendationRanker,
    record_search,
    record_view,
)
from bookburst.domain.repositories import (
    IBehaviorProfileStore,
    IBookCatalogSource,
    IKeyValueStore,
    IUserPreferenceRepository,
)
from bookburst.domain.services import IPersonalizationService

logger = logging.getLogger(__name__)

BEHAVIOR_KEY_PREFIX = "behavior:"


def behavior_key(client_id: str) -> str:
    return f"{BEHAVIOR_KEY_PREFIX}{client_id}"


class PersonalizationService(IPersonalizationService):
    """Consent-gated behaviour tracking and catalog re-ranking."""

    def __init__(
        self,
        cache: IKeyValueStore,
        profile_store: IBehaviorProfileStore,
        preference_repo: IUserPreferenceRepository,
        catalog: IBookCatalogSource,
        behavior_ttl_seconds: Optional[int] = None,
        scorer: Optional[AffinityScorer] = None,
    ):
        self.cache = cache
        self.profile_store = profile_store
        self.preference_repo = preference_repo
        self.catalog = catalog
        self.behavior_ttl_seconds = behavior_ttl_seconds
        self.scorer = scorer or AffinityScorer()
        self.ranker = RecommendationRanker(self.scorer)

    # -----------------------------------------------------------------------
    # Context lifecycle
    # -----------------------------------------------------------------------

    async def load_context(
        self, client_id: str, consent: bool, user_id: Optional[UUID] = None
    ) -> PersonalizationContext:
        ctx = PersonalizationContext(client_id=client_id, consent=consent, user_id=user_id)
        if not ctx.has_consent():
            return ctx

        if user_id is not None:
            pref = await self.preference_repo.get_or_create(user_id)
            ctx.favorite_genres = list(pref.favorite_genres)

        ctx.stored_behavior = await self._read_profile(ctx)
        return ctx

    async def _read_profile(self, ctx: PersonalizationContext) -> BehaviorProfile:
        """Load the durable profile, else the cached one.

        A failed read marks ``ctx.load_failed``.  A durable read failure still
        falls back to the cache so the page can be personalized, but the
        flag keeps that copy out of both stores.
        """
        if ctx.user_id is not None:
            try:
                durable = await self.profile_store.get(ctx.user_id)
            except Exception as exc:
                logger.warning("Failed to read behavior profile for user %s: %s", ctx.user_id, exc)
                ctx.load_failed = True
                durable = None
            if durable is not None:
                return durable

        try:
            cached = await self.cache.get_json(behavior_key(ctx.client_id))
        except Exception as exc:
            logger.warning("Failed to read cached behavior for client %s: %s", ctx.client_id, exc)
            ctx.load_failed = True
            return BehaviorProfile()
        if cached is None:
            return BehaviorProfile()
        try:
            return BehaviorProfile.from_dict(cached)
        except (TypeError, ValueError) as exc:
            logger.warning("Discarding malformed behavior for client %s: %s", ctx.client_id, exc)
            return BehaviorProfile()

    async def _persist(self, ctx: PersonalizationContext) -> None:
        if ctx.load_failed:
            # writing now would replace data we never saw
            logger.warning(
                "Not persisting behavior for client %s: profile was not fully loaded",
                ctx.client_id,
            )
            return
        payload = ctx.stored_behavior.to_dict()
        try:
            await self.cache.set_json(
                behavior_key(ctx.client_id), payload, ttl_seconds=self.behavior_ttl_seconds
            )
            if ctx.user_id is not None:
                await self.profile_store.put(ctx.user_id, ctx.stored_behavior)
        except Exception as exc:
            logger.warning("Failed to persist behavior for client %s: %s", ctx.client_id, exc)

    # -----------------------------------------------------------------------
    # Behaviour tracking
    # -----------------------------------------------------------------------

    async def track_view(
        self,
        ctx: PersonalizationContext,
        book_id: UUID,
        genre: Optional[str] = None,
        author: Optional[str] = None,
    ) -> None:
        if not ctx.has_consent():
            return
        record_view(ctx.stored_behavior, str(book_id), genre=genre, author=author)
        logger.debug("Tracked view of book %s for client %s", book_id, ctx.client_id)
        await self._persist(ctx)

    async def track_search(self, ctx: PersonalizationContext, query: str) -> None:
        if not ctx.has_consent():
            return
        if not record_search(ctx.stored_behavior, query):
            return
        await self._persist(ctx)

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def get_behavior(self, ctx: PersonalizationContext) -> BehaviorProfile:
        return ctx.behavior

    def get_favorite_genres(self, ctx: PersonalizationContext) -> list[str]:
        return self.scorer.get_favorite_genres(ctx)

    def should_highlight(self, ctx: PersonalizationContext, genre: str) -> bool:
        return self.scorer.should_highlight(ctx, genre)

    async def recommend(
        self, ctx: PersonalizationContext, limit: int = 10
    ) -> tuple[list[tuple[Book, int]], str]:
        books = await self.catalog.list_books()
        if not ctx.has_consent():
            strategy = "no-consent"
        elif not self.ranker.is_personalized(ctx):
            strategy = "cold-start"
        else:
            strategy = "personalized"
        ranked = self.ranker.rank_with_scores(books, ctx)
        logger.info(
            "Ranked %d catalog books for client %s (strategy=%s)",
            len(books), ctx.client_id, strategy,
        )
        return ranked[:limit], strategy
