from types import SimpleNamespace
from uuid import uuid4

from bookburst.domain.entities import ReadingStatus, UserBook
from bookburst.domain.visibility import filter_visible, is_visible


def _entry(owner, is_public):
    return UserBook(
        id=uuid4(),
        user_id=owner,
        book_id=uuid4(),
        status=ReadingStatus.READING,
        is_public=is_public,
    )


def test_owner_sees_private_entry():
    owner = uuid4()
    assert is_visible(_entry(owner, False), owner, owner) is True


def test_other_viewer_cannot_see_private_entry():
    owner = uuid4()
    assert is_visible(_entry(owner, False), uuid4(), owner) is False
    assert is_visible(_entry(owner, False), None, owner) is False


def test_public_entry_visible_to_anyone():
    owner = uuid4()
    entry = _entry(owner, True)
    assert is_visible(entry, uuid4(), owner) is True
    assert is_visible(entry, None, owner) is True


def test_malformed_entries_fail_closed():
    owner = uuid4()
    assert is_visible(None, owner, owner) is False
    assert is_visible(_entry(owner, True), uuid4(), None) is False
    assert is_visible(SimpleNamespace(), uuid4(), owner) is False
    assert is_visible(SimpleNamespace(is_public="yes"), uuid4(), owner) is False


def test_filter_visible_keeps_order():
    owner, viewer = uuid4(), uuid4()
    entries = [_entry(owner, True), _entry(owner, False), _entry(viewer, False), _entry(owner, True)]

    visible = filter_visible(entries, viewer)

    assert visible == [entries[0], entries[2], entries[3]]
