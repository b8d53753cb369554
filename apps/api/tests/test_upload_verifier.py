import pytest

from uploadgate.services.s3_storage import StorageServiceError
from uploadgate.services.upload_verifier import (
    UploadTooLarge,
    UploadVerified,
    is_viewable_image,
    should_include_thumbnail,
    verify_uploaded_object,
)


class _FakeStore:
    def __init__(self, size: int, fail_on: str | None = None) -> None:
        self.size = size
        self.fail_on = fail_on
        self.deleted: list[tuple[str, str]] = []
        self.presigned: list[tuple[str, str, int]] = []

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_on == operation:
            raise StorageServiceError(f"{operation} failed")

    def delete(self, bucket: str, key: str) -> None:
        self._maybe_fail("delete")
        self.deleted.append((bucket, key))

    def head_size(self, bucket: str, key: str) -> int:
        del bucket, key
        self._maybe_fail("head")
        return self.size

    def presign(self, bucket: str, key: str, ttl: int) -> str:
        self._maybe_fail("presign")
        self.presigned.append((bucket, key, ttl))
        return f"https://storage.example.com/{bucket}/{key}?ttl={ttl}"


def test_oversized_object_is_deleted_once():
    store = _FakeStore(size=2048)

    result = verify_uploaded_object(store=store, bucket="mybucket", key="big.bin", max_size=1024)

    assert result == UploadTooLarge(deleted=True)
    assert store.deleted == [("mybucket", "big.bin")]
    assert store.presigned == []


def test_object_within_limit_gets_fifteen_minute_link():
    store = _FakeStore(size=1024)

    result = verify_uploaded_object(store=store, bucket="mybucket", key="ok.bin", max_size=1024)

    assert isinstance(result, UploadVerified)
    assert result.temp_link
    assert result.thumbnail_url is None
    assert store.deleted == []
    assert store.presigned == [("mybucket", "ok.bin", 900)]


def test_thumbnail_duplicates_temp_link():
    store = _FakeStore(size=10)

    result = verify_uploaded_object(
        store=store, bucket="mybucket", key="cat.png", max_size=None, include_thumbnail=True
    )

    assert isinstance(result, UploadVerified)
    assert result.thumbnail_url == result.temp_link


def test_size_is_not_checked_without_limit():
    store = _FakeStore(size=10**12, fail_on="head")

    result = verify_uploaded_object(store=store, bucket="mybucket", key="any.bin", max_size=None)

    assert isinstance(result, UploadVerified)


@pytest.mark.parametrize("fail_on", ["head", "delete", "presign"])
def test_storage_failures_propagate(fail_on):
    store = _FakeStore(size=2048 if fail_on == "delete" else 10, fail_on=fail_on)

    with pytest.raises(StorageServiceError):
        verify_uploaded_object(store=store, bucket="mybucket", key="file.bin", max_size=1024)


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("photo.JPG", True),
        ("photo.jpeg", True),
        ("anim.gif", True),
        ("shot.png", True),
        ("doc.pdf", False),
        ("png", False),
        (".png", True),
        ("photo.", False),
        ("uploads/2024/cat.GIF", True),
        ("archive.png.zip", False),
        ("", False),
    ],
)
def test_is_viewable_image(filename, expected):
    assert is_viewable_image(filename) is expected


def test_thumbnail_only_for_browsers_without_preview():
    assert should_include_thumbnail(filename="cat.png", is_browser_preview_capable=False) is True
    assert should_include_thumbnail(filename="cat.png", is_browser_preview_capable=True) is False
    assert should_include_thumbnail(filename="report.pdf", is_browser_preview_capable=False) is False
