from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from bookburst.domain.entities import ReadingStatus, UserBook
from bookburst.domain.exceptions import NotFoundError


async def _review(repo, user, text, is_public=True, age_minutes=0):
    entry = UserBook(
        id=uuid4(),
        user_id=user.id,
        book_id=uuid4(),
        status=ReadingStatus.FINISHED,
        review=text,
        is_public=is_public,
        date_updated=datetime.utcnow() - timedelta(minutes=age_minutes),
    )
    return await repo.create(entry)


async def test_review_feed_hides_private_reviews(community_service, user_repo, user_book_repo, new_user):
    ann = await user_repo.create(new_user("Ann"))
    bob = await user_repo.create(new_user("Bob"))
    await _review(user_book_repo, ann, "public", age_minutes=5)
    await _review(user_book_repo, ann, "secret", is_public=False, age_minutes=1)

    as_bob = await community_service.list_reviews(bob.id)
    as_ann = await community_service.list_reviews(ann.id)
    anonymous = await community_service.list_reviews(None)

    assert [e.review for e, _ in as_bob] == ["public"]
    assert [e.review for e, _ in anonymous] == ["public"]
    assert [e.review for e, _ in as_ann] == ["secret", "public"]
    assert as_bob[0][1] == ann


async def test_review_feed_following_only(
    community_service, follow_service, user_repo, user_book_repo, new_user
):
    ann = await user_repo.create(new_user("Ann"))
    bob = await user_repo.create(new_user("Bob"))
    cat = await user_repo.create(new_user("Cat"))
    await _review(user_book_repo, bob, "by bob")
    await _review(user_book_repo, cat, "by cat")
    await follow_service.follow(ann.id, bob.id)

    feed = await community_service.list_reviews(ann.id, following_only=True)

    assert [e.review for e, _ in feed] == ["by bob"]
    assert await community_service.list_reviews(None, following_only=True) == []


async def test_older_followed_review_is_found_behind_many_private_ones(
    community_service, follow_service, user_repo, user_book_repo, new_user
):
    ann = await user_repo.create(new_user("Ann"))
    bob = await user_repo.create(new_user("Bob"))
    dan = await user_repo.create(new_user("Dan"))
    await _review(user_book_repo, bob, "worth the wait", age_minutes=10_000)
    for i in range(500):
        await _review(user_book_repo, dan, f"note {i}", is_public=False, age_minutes=i)
    await follow_service.follow(ann.id, bob.id)

    following = await community_service.list_reviews(ann.id, following_only=True)
    everyone = await community_service.list_reviews(ann.id)

    assert [e.review for e, _ in following] == ["worth the wait"]
    assert [e.review for e, _ in everyone] == ["worth the wait"]


async def test_review_feed_pages_past_inactive_authors(community_service, user_repo, user_book_repo, new_user):
    ann = await user_repo.create(new_user("Ann"))
    gone = await user_repo.create(new_user("Gone", is_active=False))
    await _review(user_book_repo, ann, "still here", age_minutes=60)
    for i in range(3):
        await _review(user_book_repo, gone, f"old {i}", age_minutes=i)

    feed = await community_service.list_reviews(None, limit=2)

    assert [e.review for e, _ in feed] == ["still here"]


async def test_review_feed_skips_inactive_authors(community_service, user_repo, user_book_repo, new_user):
    gone = await user_repo.create(new_user("Gone", is_active=False))
    await _review(user_book_repo, gone, "hello")

    assert await community_service.list_reviews(None) == []


async def test_profile_shows_visible_books_and_counts(
    community_service, follow_service, user_repo, user_book_repo, new_user
):
    ann = await user_repo.create(new_user("Ann"))
    bob = await user_repo.create(new_user("Bob"))
    await _review(user_book_repo, ann, "open")
    await _review(user_book_repo, ann, "closed", is_public=False)
    await follow_service.follow(bob.id, ann.id)

    profile = await community_service.get_profile(ann.id, bob.id)

    assert profile["user"] == ann
    assert [e.review for e in profile["books"]] == ["open"]
    assert profile["followers_count"] == 1
    assert profile["following_count"] == 0
    assert profile["is_following"] is True
    assert (await community_service.get_profile(ann.id, None))["is_following"] is None


async def test_unknown_profile_raises(community_service):
    with pytest.raises(NotFoundError):
        await community_service.get_profile(uuid4(), None)


async def test_list_users_with_follower_counts(community_service, follow_service, user_repo, new_user):
    ann = await user_repo.create(new_user("Ann"))
    bob = await user_repo.create(new_user("Bob"))
    await follow_service.follow(bob.id, ann.id)

    counts = {user.name: count for user, count in await community_service.list_users()}

    assert counts == {"Ann": 1, "Bob": 0}


async def test_update_profile(community_service, user_repo, new_user):
    ann = await user_repo.create(new_user("Ann"))

    updated = await community_service.update_profile(ann, name="  Annie ", bio="Reads a lot")
    assert updated.name == "Annie"
    assert updated.bio == "Reads a lot"

    with pytest.raises(ValueError):
        await community_service.update_profile(ann, name="   ")
