"""Tests for the album selection and approval workflow."""

from io import BytesIO

import pytest

from tests.conftest import InMemoryPhotoStorage, InMemoryPortalRepository
from wedding_portal.errors import NotConfiguredError, NotFoundError, ValidationError
from wedding_portal.services.albums import (
    AlbumService,
    PhotoUpload,
    normalize_selection,
    stored_filename,
)


def _service(
    repository: InMemoryPortalRepository, storage: InMemoryPhotoStorage | None = None
) -> AlbumService:
    return AlbumService(
        repository=repository, photo_storage=storage or InMemoryPhotoStorage()
    )


def _album_with_photos(
    repository: InMemoryPortalRepository, count: int = 3
) -> tuple[int, int, list[int]]:
    customer_id = repository.create_customer("bride1", "hash", "Bride")
    album_id = repository.create_album(customer_id, "Wedding Day", "2025-06-01")
    photo_ids = [
        repository.add_photo(album_id, f"albums/{album_id}/p{i}.jpg", f"p{i}.jpg", i)
        for i in range(count)
    ]
    return customer_id, album_id, photo_ids


def test_customer_without_album_gets_empty_view() -> None:
    repository = InMemoryPortalRepository()
    customer_id = repository.create_customer("groom", "hash", None)

    view = _service(repository).get_customer_album(customer_id)

    assert view == {"album": None, "photos": [], "selectedIds": [], "approvedAt": None}


def test_customer_album_lists_photos_with_urls() -> None:
    repository = InMemoryPortalRepository()
    customer_id, album_id, photo_ids = _album_with_photos(repository)

    view = _service(repository).get_customer_album(customer_id)

    assert view["album"] == {
        "id": album_id,
        "name": "Wedding Day",
        "event_date": "2025-06-01",
    }
    assert [photo["id"] for photo in view["photos"]] == photo_ids
    assert view["photos"][0]["url"] == f"/uploads/albums/{album_id}/p0.jpg"
    assert view["selectedIds"] == []
    assert view["approvedAt"] is None


def test_selection_replaces_previous_selection() -> None:
    repository = InMemoryPortalRepository()
    customer_id, album_id, _ = _album_with_photos(repository, count=4)
    service = _service(repository)

    service.set_selection(customer_id, [1, 2, 3])
    service.set_selection(customer_id, [2, 4])

    assert repository.albums[album_id].selected_photo_ids == (2, 4)


def test_selection_is_deduplicated_and_coerced() -> None:
    assert normalize_selection(["3", 1, 3, 1.0, " 2 "]) == [3, 1, 2]


def test_selection_without_list_clears() -> None:
    assert normalize_selection(None) == []
    assert normalize_selection("1,2") == []


def test_selection_rejects_non_numeric_ids() -> None:
    with pytest.raises(ValidationError):
        normalize_selection([1, "abc"])
    with pytest.raises(ValidationError):
        normalize_selection([True])


def test_selection_keeps_ids_outside_the_album() -> None:
    repository = InMemoryPortalRepository()
    customer_id, album_id, _ = _album_with_photos(repository)

    _service(repository).set_selection(customer_id, [999])

    assert repository.albums[album_id].selected_photo_ids == (999,)


def test_selection_without_album_is_not_found() -> None:
    repository = InMemoryPortalRepository()
    customer_id = repository.create_customer("groom", "hash", None)

    with pytest.raises(NotFoundError):
        _service(repository).set_selection(customer_id, [1])


def test_approve_twice_keeps_album_approved_and_selection() -> None:
    repository = InMemoryPortalRepository()
    customer_id, album_id, _ = _album_with_photos(repository)
    service = _service(repository)
    service.set_selection(customer_id, [1, 3])

    service.approve(customer_id)
    first = repository.albums[album_id].approved_at
    service.approve(customer_id)
    second = repository.albums[album_id].approved_at

    assert first is not None
    assert second is not None
    assert second >= first
    assert repository.albums[album_id].selected_photo_ids == (1, 3)


def test_workflow_targets_most_recent_album() -> None:
    repository = InMemoryPortalRepository()
    customer_id = repository.create_customer("bride1", "hash", None)
    old_album = repository.create_album(customer_id, "Engagement", None)
    new_album = repository.create_album(customer_id, "Wedding", None)
    service = _service(repository)

    service.set_selection(customer_id, [5])
    service.approve(customer_id)

    assert repository.albums[new_album].selected_photo_ids == (5,)
    assert repository.albums[new_album].approved_at is not None
    assert repository.albums[old_album].selected_photo_ids == ()
    assert repository.albums[old_album].approved_at is None


def test_add_photos_continues_sort_order() -> None:
    repository = InMemoryPortalRepository()
    _, album_id, _ = _album_with_photos(repository, count=2)
    storage = InMemoryPhotoStorage()
    service = _service(repository, storage)

    count = service.add_photos(
        album_id,
        [
            PhotoUpload("c.jpg", BytesIO(b"c"), "image/jpeg"),
            PhotoUpload("d.jpg", BytesIO(b"d"), "image/jpeg"),
        ],
    )

    photos = repository.get_photos_by_album_id(album_id)
    assert count == 2
    assert [photo.sort_order for photo in photos] == [0, 1, 2, 3]
    assert photos[-1].filename.endswith("-d.jpg")
    assert len(storage.files) == 2


def test_add_photos_keeps_files_with_the_same_name_apart() -> None:
    repository = InMemoryPortalRepository()
    _, album_id, _ = _album_with_photos(repository, count=0)
    storage = InMemoryPhotoStorage()

    _service(repository, storage).add_photos(
        album_id,
        [
            PhotoUpload("IMG_0001.jpg", BytesIO(b"first")),
            PhotoUpload("IMG_0001.jpg", BytesIO(b"second")),
        ],
    )

    photos = repository.get_photos_by_album_id(album_id)
    assert len({photo.storage_path for photo in photos}) == 2
    assert sorted(storage.files.values()) == [b"first", b"second"]


def test_add_photos_to_missing_album_is_not_found() -> None:
    with pytest.raises(NotFoundError):
        _service(InMemoryPortalRepository()).add_photos(42, [])


def test_add_photos_on_read_only_storage_fails_fast() -> None:
    repository = InMemoryPortalRepository()
    _, album_id, _ = _album_with_photos(repository, count=0)
    service = _service(repository, InMemoryPhotoStorage(read_only=True))

    with pytest.raises(NotConfiguredError):
        service.add_photos(album_id, [PhotoUpload("a.jpg", BytesIO(b"a"))])
    assert repository.get_photos_by_album_id(album_id) == []


def test_album_detail_flags_selected_photos() -> None:
    repository = InMemoryPortalRepository()
    customer_id, album_id, photo_ids = _album_with_photos(repository)
    service = _service(repository)
    service.set_selection(customer_id, [photo_ids[1]])

    detail = service.get_album_detail(album_id)

    assert [photo["selected"] for photo in detail["photos"]] == [False, True, False]
    assert detail["album"]["customer_id"] == customer_id
    assert detail["selectedIds"] == [photo_ids[1]]


def test_album_detail_missing_album() -> None:
    with pytest.raises(NotFoundError):
        _service(InMemoryPortalRepository()).get_album_detail(7)


def test_out_of_range_album_ids_are_not_found() -> None:
    service = _service(InMemoryPortalRepository())

    with pytest.raises(NotFoundError):
        service.get_album_detail(10**20)
    with pytest.raises(NotFoundError):
        service.add_photos(10**20, [])
    with pytest.raises(NotFoundError):
        service.locate_photo(-1, "a.jpg")


def test_stored_filename_is_path_safe() -> None:
    assert (
        stored_filename("my photo (1).jpg", now_ms=1700, token="ab12cd34")
        == "1700-ab12cd34-my_photo__1_.jpg"
    )
    assert stored_filename("../../etc/passwd", now_ms=5, token="t") == "5-t-passwd"
    assert stored_filename(None, now_ms=5, token="t") == "5-t-photo"


def test_stored_filename_is_unique_within_a_millisecond() -> None:
    assert stored_filename("a.jpg", now_ms=5) != stored_filename("a.jpg", now_ms=5)


def test_locate_photo_rejects_path_traversal() -> None:
    with pytest.raises(NotFoundError):
        _service(InMemoryPortalRepository()).locate_photo(1, "../secret")
