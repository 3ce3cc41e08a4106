from uuid import uuid4

import pytest

from bookburst.domain.entities import ReadingStatus
from bookburst.domain.exceptions import DuplicateEntryError, NotFoundError


async def test_add_to_shelf(shelf_service, book_repo, new_book):
    book = await book_repo.create(new_book("Dune", "Frank Herbert", "Sci-Fi"))
    user_id = uuid4()

    entry = await shelf_service.add_to_shelf(user_id, book.id, ReadingStatus.READING, progress=40)

    assert entry.user_id == user_id
    assert entry.status is ReadingStatus.READING
    assert entry.progress == 40
    assert entry.is_public is False


async def test_unknown_book_is_rejected(shelf_service):
    with pytest.raises(NotFoundError):
        await shelf_service.add_to_shelf(uuid4(), uuid4(), ReadingStatus.READING)


async def test_duplicate_detection_ignores_case_and_whitespace(shelf_service, book_repo, new_book):
    first = await book_repo.create(new_book("Dune", "Frank Herbert"))
    again = await book_repo.create(new_book("  dune ", "FRANK HERBERT"))
    user_id = uuid4()

    await shelf_service.add_to_shelf(user_id, first.id, ReadingStatus.WANT_TO_READ)
    with pytest.raises(DuplicateEntryError):
        await shelf_service.add_to_shelf(user_id, again.id, ReadingStatus.READING)
    with pytest.raises(DuplicateEntryError):
        await shelf_service.add_to_shelf(user_id, first.id, ReadingStatus.READING)

    # another reader may shelve the same book
    await shelf_service.add_to_shelf(uuid4(), first.id, ReadingStatus.READING)


@pytest.mark.parametrize("field,value", [("progress", 101), ("progress", -1), ("rating", 6)])
async def test_out_of_range_values_rejected(shelf_service, book_repo, new_book, field, value):
    book = await book_repo.create(new_book("Emma", "Jane Austen"))
    with pytest.raises(ValueError):
        await shelf_service.add_to_shelf(uuid4(), book.id, ReadingStatus.READING, **{field: value})


async def test_owner_updates_entry(shelf_service, book_repo, new_book):
    book = await book_repo.create(new_book("Emma", "Jane Austen"))
    owner = uuid4()
    entry = await shelf_service.add_to_shelf(owner, book.id, ReadingStatus.READING)

    updated = await shelf_service.update_entry(
        owner, entry.id, {"status": "finished", "rating": 4, "review": "Lovely", "is_public": True}
    )

    assert updated.status is ReadingStatus.FINISHED
    assert updated.rating == 4
    assert updated.review == "Lovely"
    assert updated.is_public is True


async def test_non_owner_cannot_modify(shelf_service, book_repo, new_book):
    book = await book_repo.create(new_book("Emma", "Jane Austen"))
    owner = uuid4()
    entry = await shelf_service.add_to_shelf(owner, book.id, ReadingStatus.READING)

    with pytest.raises(PermissionError):
        await shelf_service.update_entry(uuid4(), entry.id, {"rating": 1})
    with pytest.raises(PermissionError):
        await shelf_service.delete_entry(uuid4(), entry.id)


async def test_update_rejects_unknown_fields(shelf_service, book_repo, new_book):
    book = await book_repo.create(new_book("Emma", "Jane Austen"))
    owner = uuid4()
    entry = await shelf_service.add_to_shelf(owner, book.id, ReadingStatus.READING)

    with pytest.raises(ValueError):
        await shelf_service.update_entry(owner, entry.id, {"user_id": uuid4()})
    with pytest.raises(ValueError):
        await shelf_service.update_entry(owner, entry.id, {"status": None})


async def test_delete_entry(shelf_service, book_repo, new_book):
    book = await book_repo.create(new_book("Emma", "Jane Austen"))
    owner = uuid4()
    entry = await shelf_service.add_to_shelf(owner, book.id, ReadingStatus.READING)

    await shelf_service.delete_entry(owner, entry.id)

    assert await shelf_service.get_shelf(owner, owner) == []
    with pytest.raises(NotFoundError):
        await shelf_service.delete_entry(owner, entry.id)


async def test_get_shelf_filters_status_and_visibility(shelf_service, book_repo, new_book):
    owner = uuid4()
    public = await book_repo.create(new_book("A", "x"))
    private = await book_repo.create(new_book("B", "y"))
    done = await book_repo.create(new_book("C", "z"))
    await shelf_service.add_to_shelf(owner, public.id, ReadingStatus.READING, is_public=True)
    await shelf_service.add_to_shelf(owner, private.id, ReadingStatus.READING)
    await shelf_service.add_to_shelf(owner, done.id, ReadingStatus.FINISHED, is_public=True)

    assert len(await shelf_service.get_shelf(owner, owner)) == 3
    assert [e.book_id for e in await shelf_service.get_shelf(owner, uuid4())] == [public.id, done.id]
    reading = await shelf_service.get_shelf(owner, owner, ReadingStatus.READING)
    assert {e.book_id for e in reading} == {public.id, private.id}
