"""
Media storage adapter.

Domain services only see the ``MediaStore`` interface: ``upload`` returns the
public URL and an id for later deletion, or raises ``MediaUploadError``;
``delete`` is best-effort and reports failure with ``False``.
"""

import io
import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from spotjott.errors import MediaUploadError
from spotjott.models import MediaType

logger = logging.getLogger(__name__)


@dataclass
class MediaUpload:
    """Raw file received from a client."""
    data: bytes
    mime_type: str
    filename: str = "upload"

    @property
    def media_type(self) -> MediaType:
        return MediaType.video if self.mime_type.startswith("video/") else MediaType.image


@dataclass
class TransformOptions:
    width: Optional[int] = None
    height: Optional[int] = None
    crop: str = "limit"  # "fill" crops to exact size, "limit" only shrinks
    quality: int = 85


@dataclass
class UploadResult:
    url: str
    public_id: str


PROFILE_PICTURE = TransformOptions(width=300, height=300, crop="fill")
JOT_MEDIA = TransformOptions(width=1200, height=1200, crop="limit")


class MediaStore:
    """Interface for object storage used by media-bearing flows."""

    def upload(self, upload: MediaUpload, folder: str, options: Optional[TransformOptions] = None) -> UploadResult:
        raise NotImplementedError

    def delete(self, public_id: Optional[str]) -> bool:
        raise NotImplementedError

    def is_available(self) -> bool:
        return True


class LocalMediaStore(MediaStore):
    """
    Filesystem-backed media store.

    Files land under ``root/<folder>/<uuid><ext>`` and are served from
    ``base_url``; the public id is the path relative to ``root``.
    """

    def __init__(self, root: str, base_url: str = "/media", max_bytes: int = 10 * 1024 * 1024):
        self.root = os.path.abspath(root)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def _validate(self, upload: MediaUpload) -> None:
        if not upload or not upload.data:
            raise MediaUploadError("No file provided")
        if not (upload.mime_type.startswith("image/") or upload.mime_type.startswith("video/")):
            raise MediaUploadError("Only image and video files are allowed")
        if len(upload.data) > self.max_bytes:
            raise MediaUploadError(f"File exceeds the {self.max_bytes // (1024 * 1024)}MB limit")

    def _get_file_extension(self, upload: MediaUpload) -> str:
        ext = os.path.splitext(upload.filename or "")[1].lower()
        if ext:
            return ext
        return mimetypes.guess_extension(upload.mime_type) or ""

    def _transform_image(self, data: bytes, options: TransformOptions) -> bytes:
        """Resize an image according to the transform options."""
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format or "PNG"
            img = ImageOps.exif_transpose(img)
            size = (options.width or img.width, options.height or img.height)
            if options.crop == "fill":
                img = ImageOps.fit(img, size)
            else:
                img.thumbnail(size)
            if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            out = io.BytesIO()
            save_kwargs = {"quality": options.quality} if fmt in ("JPEG", "WEBP") else {}
            img.save(out, format=fmt, **save_kwargs)
            return out.getvalue()

    def upload(self, upload: MediaUpload, folder: str, options: Optional[TransformOptions] = None) -> UploadResult:
        self._validate(upload)

        data = upload.data
        if options and upload.media_type == MediaType.image:
            try:
                data = self._transform_image(data, options)
            except (UnidentifiedImageError, OSError) as e:
                logger.warning("Could not process image %s: %s", upload.filename, e)
                raise MediaUploadError("Uploaded image could not be processed")

        public_id = f"{folder}/{uuid.uuid4().hex}{self._get_file_extension(upload)}"
        path = os.path.join(self.root, public_id)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error("Media upload failed for %s: %s", public_id, e)
            raise MediaUploadError()

        logger.info("Stored media %s (%d bytes)", public_id, len(data))
        return UploadResult(url=f"{self.base_url}/{public_id}", public_id=public_id)

    def delete(self, public_id: Optional[str]) -> bool:
        if not public_id:
            return False
        path = os.path.abspath(os.path.join(self.root, public_id))
        if not path.startswith(self.root + os.sep):
            logger.warning("Refusing to delete media outside root: %s", public_id)
            return False
        try:
            os.remove(path)
            return True
        except OSError as e:
            logger.warning("Media delete failed for %s: %s", public_id, e)
            return False

    def is_available(self) -> bool:
        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError:
            return False
        return os.access(self.root, os.W_OK)
