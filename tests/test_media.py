import asyncio
import io
import re

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.core.errors import APIError
from app.core.storage import ObjectStorage, StorageError
from app.modules.media.service import MediaService, build_object_key, read_image, validate_image


def test_object_key_is_namespaced_by_owner():
    key = build_object_key("alice", "Holiday.JPEG")

    assert re.fullmatch(r"alice/\d{13}-[0-9a-f]{8}\.jpeg", key)


def test_object_key_defaults_extension():
    assert build_object_key("alice", None).endswith(".jpg")
    assert build_object_key("alice", "noext").endswith(".jpg")


def test_object_keys_do_not_collide():
    keys = {build_object_key("alice", "a.png") for _ in range(50)}

    assert len(keys) == 50


@pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp", "image/gif"])
def test_allowed_image_types(content_type):
    validate_image(content_type, 1024)


def test_size_is_checked_before_type():
    with pytest.raises(APIError) as exc_info:
        validate_image("application/pdf", 6 * 1024 * 1024)

    assert exc_info.value.code == "file_too_large"
    assert exc_info.value.status_code == 400


def test_exactly_five_megabytes_is_allowed():
    validate_image("image/png", 5 * 1024 * 1024)


def test_unsupported_type():
    with pytest.raises(APIError) as exc_info:
        validate_image("text/plain", 10)

    assert exc_info.value.code == "unsupported_image_type"


def test_discard_swallows_storage_errors(storage):
    storage.fail_delete = True

    assert MediaService(storage).discard("alice/x.png") is False
    assert MediaService(storage).discard(None) is False


def test_serve_stored_media(client, storage):
    storage.objects["alice/1-abc.png"] = (b"png-bytes", "image/png")

    response = client.get("/api/v1/media/alice/1-abc.png")

    assert response.status_code == 200
    assert response.content == b"png-bytes"
    assert response.headers["content-type"] == "image/png"


def test_serve_missing_media_returns_404(client):
    response = client.get("/api/v1/media/alice/none.png")

    assert response.status_code == 404
    assert response.json() == {"error": "File not found"}


@pytest.fixture()
def local_storage(tmp_path, monkeypatch):
    from app.core import storage as storage_module

    monkeypatch.setattr(storage_module.settings, "UPLOAD_DIRECTORY", str(tmp_path / "uploads"))
    monkeypatch.setattr(storage_module.settings, "STORAGE_ENDPOINT", "")
    return ObjectStorage()


def test_local_storage_round_trip(local_storage, tmp_path):
    local_storage.upload_bytes("alice/a.png", b"data", "image/png")

    url = local_storage.get_public_url("alice/a.png")

    assert url.endswith("/api/v1/media/alice/a.png")
    assert local_storage.key_from_url(url) == "alice/a.png"
    assert local_storage.read_object("alice/a.png") == (b"data", None)
    assert (tmp_path / "uploads" / "alice" / "a.png").read_bytes() == b"data"

    local_storage.delete_object("alice/a.png")
    assert local_storage.read_object("alice/a.png") is None


def test_local_storage_never_overwrites(local_storage):
    local_storage.upload_bytes("alice/a.png", b"first", "image/png")

    with pytest.raises(StorageError):
        local_storage.upload_bytes("alice/a.png", b"second", "image/png")


def test_local_storage_rejects_paths_outside_root(local_storage):
    assert local_storage.read_object("../secret.txt") is None


def test_unknown_url_has_no_key(local_storage):
    assert local_storage.key_from_url("https://elsewhere.test/x.png") is None


def test_object_key_flattens_unsafe_owner_uid():
    key = build_object_key("../outside", "a.jpg")

    assert key.startswith("___outside/")
    assert key.count("/") == 1
    assert ".." not in key


def test_object_key_for_unsafe_uid_stays_in_upload_directory(local_storage, tmp_path):
    key = build_object_key("../outside", "a.jpg")

    local_storage.upload_bytes(key, b"data", "image/jpeg")

    assert (tmp_path / "uploads" / key).is_file()
    assert not (tmp_path / "outside").exists()


def test_local_storage_refuses_to_write_outside_root(local_storage, tmp_path):
    with pytest.raises(StorageError):
        local_storage.upload_bytes("../outside/a.jpg", b"data", "image/jpeg")

    assert not (tmp_path / "outside").exists()


def test_local_storage_refuses_to_delete_outside_root(local_storage, tmp_path):
    victim = tmp_path / "keep.txt"
    victim.write_bytes(b"keep")

    with pytest.raises(StorageError):
        local_storage.delete_object("../keep.txt")

    assert victim.read_bytes() == b"keep"


def _upload(body: bytes, content_type: str = "image/png", size=None) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(body),
        size=size,
        filename="photo.png",
        headers=Headers({"content-type": content_type}),
    )


def test_read_image_returns_body():
    assert asyncio.run(read_image(_upload(b"png", size=3))) == b"png"


def test_read_image_rejects_declared_size_before_reading():
    upload = _upload(b"0" * 16, size=6 * 1024 * 1024)

    with pytest.raises(APIError) as exc_info:
        asyncio.run(read_image(upload))

    assert exc_info.value.code == "file_too_large"
    assert upload.file.tell() == 0


def test_read_image_without_size_reads_at_most_one_byte_past_limit():
    limit = 5 * 1024 * 1024
    upload = _upload(b"0" * (6 * 1024 * 1024))

    with pytest.raises(APIError) as exc_info:
        asyncio.run(read_image(upload))

    assert exc_info.value.code == "file_too_large"
    assert upload.file.tell() == limit + 1
