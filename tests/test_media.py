"""Tests for the filesystem media store."""

import io
import os

import pytest
from PIL import Image

from spotjott.errors import MediaUploadError
from spotjott.media import JOT_MEDIA, PROFILE_PICTURE, LocalMediaStore, MediaUpload
from spotjott.models import MediaType


def png_bytes(width, height):
    out = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 40, 40)).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def root(tmp_path):
    return tmp_path / "media"


@pytest.fixture
def store(root):
    return LocalMediaStore(str(root), base_url="/media/", max_bytes=1024 * 1024)


class TestLocalMediaStore:
    """Test upload validation, transforms and deletion."""

    def test_profile_picture_is_cropped_to_square(self, store, root):
        upload = MediaUpload(data=png_bytes(640, 480), mime_type="image/png", filename="me.png")
        result = store.upload(upload, "user_profiles", PROFILE_PICTURE)

        assert result.public_id.startswith("user_profiles/")
        assert result.public_id.endswith(".png")
        assert result.url == f"/media/{result.public_id}"
        with Image.open(root / result.public_id) as img:
            assert img.size == (300, 300)

    def test_limit_only_shrinks(self, store, root):
        upload = MediaUpload(data=png_bytes(200, 100), mime_type="image/png", filename="small.png")
        result = store.upload(upload, "jots", JOT_MEDIA)
        with Image.open(root / result.public_id) as img:
            assert img.size == (200, 100)

    def test_video_is_stored_untouched(self, store, root):
        upload = MediaUpload(data=b"\x00\x00\x00\x18ftypmp42", mime_type="video/mp4", filename="clip.mp4")
        assert upload.media_type == MediaType.video
        result = store.upload(upload, "stories", JOT_MEDIA)
        assert (root / result.public_id).read_bytes() == upload.data

    def test_extension_from_mime_type(self, store):
        upload = MediaUpload(data=png_bytes(10, 10), mime_type="image/png", filename="")
        assert store.upload(upload, "jots").public_id.endswith(".png")

    @pytest.mark.parametrize("upload,message", [
        (MediaUpload(data=b"", mime_type="image/png"), "No file provided"),
        (MediaUpload(data=b"%PDF-1.4", mime_type="application/pdf"), "Only image and video files are allowed"),
        (MediaUpload(data=b"x" * (1024 * 1024 + 1), mime_type="video/mp4"), "File exceeds the 1MB limit"),
    ])
    def test_rejected_uploads(self, store, upload, message):
        with pytest.raises(MediaUploadError) as exc:
            store.upload(upload, "jots")
        assert exc.value.message == message
        assert exc.value.status_code == 400

    def test_undecodable_image_is_rejected(self, store):
        upload = MediaUpload(data=b"not really a png", mime_type="image/png", filename="bad.png")
        with pytest.raises(MediaUploadError) as exc:
            store.upload(upload, "jots", JOT_MEDIA)
        assert exc.value.message == "Uploaded image could not be processed"

    def test_delete(self, store, root):
        result = store.upload(MediaUpload(data=png_bytes(5, 5), mime_type="image/png"), "jots")
        assert store.delete(result.public_id)
        assert not (root / result.public_id).exists()
        assert not store.delete(result.public_id)

    def test_delete_refuses_paths_outside_root(self, store, root, tmp_path):
        root.mkdir(parents=True, exist_ok=True)
        outside = tmp_path / "outside.txt"
        outside.write_text("keep me")
        assert not store.delete(os.path.join("..", "outside.txt"))
        assert outside.exists()
        assert not store.delete(None)

    def test_is_available(self, store):
        assert store.is_available()
