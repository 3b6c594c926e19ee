import logging
import os
import uuid
from pathlib import Path

logger = logging.getLogger("splitsies")

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "image/heif": ".heif",
}


class LocalImageStore:
    """Stores receipt images on disk under opaque references."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or os.getenv("IMAGE_DIR", "./receipt_images"))

    def save(self, image_bytes: bytes, content_type: str | None = None) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        ref = uuid.uuid4().hex + EXTENSIONS.get(content_type or "", ".jpg")
        (self.root / ref).write_bytes(image_bytes)
        return ref

    def path(self, ref: str) -> Path | None:
        # refs are bare file names; anything else is not ours
        if Path(ref).name != ref:
            return None
        p = self.root / ref
        return p if p.is_file() else None

    def delete(self, ref: str) -> None:
        p = self.path(ref)
        if p is None:
            return
        try:
            p.unlink()
        except OSError:
            logger.warning("Could not remove receipt image", extra={"extra_data": {"image_ref": ref}})
