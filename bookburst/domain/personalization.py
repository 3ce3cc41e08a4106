"""Personalization core: consent gate, behaviour recording, affinity, ranking.

Everything in this module is synchronous and free of I/O.  A
:class:`PersonalizationContext` is loaded by
``bookburst.services.personalization_service`` at the start of a request,
read and mutated here, and written back by the same service afterwards.

Scoring model
-------------
Favorite genres are the three genres with the most recorded views (ties keep
the order in which the genres were first seen), followed by recently viewed
genres not already listed, capped at five.  A catalog book then scores:

  +5  its genre is a favorite genre
  +3  its author was recently viewed
  -2  the book itself was recently viewed

and the catalog is stably sorted by descending score.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence
from uuid import UUID

from bookburst.domain.entities import BehaviorProfile, Book

MAX_RECENT_GENRES = 5
MAX_RECENT_AUTHORS = 5
MAX_RECENT_BOOKS = 10
MAX_SEARCH_HISTORY = 10

TOP_INTERACTION_GENRES = 3
MAX_FAVORITE_GENRES = 5

FAVORITE_GENRE_BOOST = 5
RECENT_AUTHOR_BOOST = 3
RECENTLY_VIEWED_PENALTY = -2


def push_recent(items: Sequence[str], value: str, cap: int) -> list[str]:
    """Move ``value`` to the front of ``items``, dropping its older copy, and cap."""
    return [value, *(item for item in items if item != value)][:cap]


@dataclass
class PersonalizationContext:
    """Per-request view of one client's consent and behaviour.

    ``stored_behavior`` is whatever was loaded from the stores; callers read
    :attr:`behavior`, which is the empty default whenever consent is absent.
    ``load_failed`` is set when a store could not be read; the profile in hand
    may then be incomplete, so it is served but never written back.
    """

    client_id: str
    consent: bool = False
    user_id: Optional[UUID] = None
    favorite_genres: list[str] = field(default_factory=list)
    stored_behavior: BehaviorProfile = field(default_factory=BehaviorProfile)
    consent_changed: bool = False
    load_failed: bool = False

    def has_consent(self) -> bool:
        return self.consent is True

    def set_consent(self, value: bool) -> None:
        self.consent = bool(value)
        self.consent_changed = True

    @property
    def behavior(self) -> BehaviorProfile:
        if not self.has_consent():
            return BehaviorProfile()
        return self.stored_behavior


# ---------------------------------------------------------------------------
# Behaviour recording
# ---------------------------------------------------------------------------
def record_view(
    profile: BehaviorProfile,
    book_id: str,
    genre: Optional[str] = None,
    author: Optional[str] = None,
) -> None:
    profile.recently_viewed_books = push_recent(
        profile.recently_viewed_books, str(book_id), MAX_RECENT_BOOKS
    )
    if genre:
        profile.recently_viewed_genres = push_recent(
            profile.recently_viewed_genres, genre, MAX_RECENT_GENRES
        )
        profile.interactions_by_genre[genre] = profile.interactions_by_genre.get(genre, 0) + 1
    if author:
        profile.recently_viewed_authors = push_recent(
            profile.recently_viewed_authors, author, MAX_RECENT_AUTHORS
        )


def record_search(profile: BehaviorProfile, query: str) -> bool:
    """Push ``query`` onto the search history.  Returns False for blank queries."""
    if not query or not query.strip():
        return False
    profile.search_history = push_recent(profile.search_history, query, MAX_SEARCH_HISTORY)
    return True


# ---------------------------------------------------------------------------
# Affinity
# ---------------------------------------------------------------------------
def top_interaction_genres(
    profile: BehaviorProfile, limit: int = TOP_INTERACTION_GENRES
) -> list[str]:
    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(profile.interactions_by_genre.items(), key=lambda item: -item[1])
    return [genre for genre, _ in ranked[:limit]]


def favorite_genres(profile: BehaviorProfile) -> list[str]:
    genres = top_interaction_genres(profile)
    for genre in profile.recently_viewed_genres:
        if genre not in genres:
            genres.append(genre)
    return genres[:MAX_FAVORITE_GENRES]


class AffinityScorer:
    """Derives genre preferences from a context; never caches results."""

    def get_favorite_genres(self, ctx: PersonalizationContext) -> list[str]:
        if not ctx.has_consent():
            return []
        return favorite_genres(ctx.behavior)

    def should_highlight(self, ctx: PersonalizationContext, genre: str) -> bool:
        if not ctx.has_consent():
            return False
        if genre in ctx.favorite_genres:
            return True
        return genre in top_interaction_genres(ctx.behavior)


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------
def score_book(book: Book, profile: BehaviorProfile, favorites: Sequence[str]) -> int:
    score = 0
    if book.genre and book.genre in favorites:
        score += FAVORITE_GENRE_BOOST
    if book.author and book.author in profile.recently_viewed_authors:
        score += RECENT_AUTHOR_BOOST
    if str(book.id) in profile.recently_viewed_books:
        score += RECENTLY_VIEWED_PENALTY
    return score


class RecommendationRanker:
    """Reorders a catalog by behaviour score.

    The output depends only on the catalog and the context's profile, so the
    same inputs always give the same order.
    """

    def __init__(self, scorer: Optional[AffinityScorer] = None):
        self.scorer = scorer or AffinityScorer()

    def is_personalized(self, ctx: PersonalizationContext) -> bool:
        return ctx.has_consent() and not ctx.behavior.is_empty()

    def rank_with_scores(
        self, catalog: Sequence[Book], ctx: PersonalizationContext
    ) -> list[tuple[Book, int]]:
        if not catalog or not self.is_personalized(ctx):
            return [(book, 0) for book in catalog]
        profile = ctx.behavior
        favorites = self.scorer.get_favorite_genres(ctx)
        scored = [(book, score_book(book, profile, favorites)) for book in catalog]
        return sorted(scored, key=lambda pair: -pair[1])

    def rank(self, catalog: Sequence[Book], ctx: PersonalizationContext) -> list[Book]:
        if not catalog or not self.is_personalized(ctx):
            return list(catalog)
        return [book for book, _ in self.rank_with_scores(catalog, ctx)]
