import os
from typing import BinaryIO

from app.core.config import settings
from app.core.errors import ValidationError

CHUNK_SIZE = 8192


class BlobStore:
    """Files kept on local disk under ``root/<namespace>/<filename>``."""

    def __init__(self, root: str):
        self.root = root

    def path(self, namespace: str, filename: str) -> str:
        # Reject anything that would escape the namespace directory.
        if not filename or os.path.basename(filename) != filename or filename in (".", ".."):
            raise ValidationError("filename", "invalid file name")
        return os.path.join(self.root, namespace, filename)

    def exists(self, namespace: str, filename: str) -> bool:
        return os.path.isfile(self.path(namespace, filename))

    def save(self, namespace: str, filename: str, source: BinaryIO, max_bytes: int) -> int:
        """Copy ``source`` into the store and return the byte count."""
        target = self.path(namespace, filename)
        os.makedirs(os.path.dirname(target), exist_ok=True)

        total = 0
        with open(target, "wb") as f:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if total > max_bytes:
                    f.close()
                    os.remove(target)
                    raise ValidationError("file", f"file is too large (max {max_bytes} bytes)")
                f.write(chunk)
        return total

    def delete(self, namespace: str, filename: str) -> None:
        try:
            os.remove(self.path(namespace, filename))
        except FileNotFoundError:
            pass


def get_blob_store() -> BlobStore:
    return BlobStore(settings.UPLOAD_DIR)
