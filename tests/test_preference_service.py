from uuid import uuid4

import pytest


async def test_defaults_created_lazily(preference_service):
    pref = await preference_service.get_preferences(uuid4())

    assert pref.theme == "light"
    assert pref.view_mode == "grid"
    assert pref.favorite_genres == []
    assert pref.reading_time == 0


async def test_update_merges_only_supplied_fields(preference_service):
    user_id = uuid4()
    await preference_service.update_preferences(user_id, theme="dark")
    pref = await preference_service.update_preferences(
        user_id, favorite_genres=[" Fiction", "Poetry", "Fiction", ""]
    )

    assert pref.theme == "dark"
    assert pref.favorite_genres == ["Fiction", "Poetry"]


@pytest.mark.parametrize(
    "kwargs", [{"theme": "neon"}, {"view_mode": "carousel"}, {"sort_order": "random"}]
)
async def test_invalid_values_rejected(preference_service, kwargs):
    with pytest.raises(ValueError):
        await preference_service.update_preferences(uuid4(), **kwargs)


async def test_reading_time_accumulates(preference_service):
    user_id = uuid4()
    await preference_service.add_reading_time(user_id, 60)
    pref = await preference_service.add_reading_time(user_id, 30)

    assert pref.reading_time == 90
    with pytest.raises(ValueError):
        await preference_service.add_reading_time(user_id, -5)


async def test_recently_viewed_dedups_and_caps(preference_service):
    user_id = uuid4()
    books = [uuid4() for _ in range(12)]
    for book_id in books:
        await preference_service.add_recently_viewed(user_id, book_id)
    pref = await preference_service.add_recently_viewed(user_id, books[5])

    assert len(pref.recently_viewed_books) == 10
    assert pref.recently_viewed_books[0] == str(books[5])
    assert pref.recently_viewed_books.count(str(books[5])) == 1
