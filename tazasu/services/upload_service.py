# File: tazasu/services/upload_service.py

"""
Image upload handling for avatars and complaint photos.

Files are validated by their declared MIME type and size, then written under
the upload root with a generated, collision resistant name. The bytes are not
sniffed: a client that lies about the MIME type is trusted.

Reading happens on the event loop (``read_upload``); writing to disk
(``UploadStorage.store``) is blocking and belongs in the threadpool.
"""

import logging
import time
import uuid
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from tazasu.core.errors import TooLarge, TooManyFiles, UnsupportedType, ValidationError

logger = logging.getLogger(__name__)

MB = 1024 * 1024
MAX_FILES = 5
URL_PREFIX = "/uploads"

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}


class UploadKind(str, Enum):
    AVATAR = "avatar"
    COMPLAINT = "complaint"
    GENERAL = "general"


@dataclass(frozen=True)
class UploadPolicy:
    subdir: str
    prefix: str
    max_bytes: int


POLICIES = {
    UploadKind.AVATAR: UploadPolicy(subdir="avatars", prefix="avatar", max_bytes=5 * MB),
    UploadKind.COMPLAINT: UploadPolicy(subdir="complaints", prefix="complaint", max_bytes=10 * MB),
    UploadKind.GENERAL: UploadPolicy(subdir="complaints", prefix="complaint", max_bytes=10 * MB),
}


@dataclass
class StoredFile:
    url: str
    filename: str
    original_name: Optional[str]
    size: int
    mimetype: str

    def to_dict(self) -> dict:
        data = asdict(self)
        # Field name the frontend expects.
        data["originalName"] = data.pop("original_name")
        return data


def validate_upload(content_type: Optional[str], size: int, kind: UploadKind) -> UploadPolicy:
    """Check a declared MIME type and byte size against the policy for ``kind``."""
    policy = POLICIES[kind]
    if (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise UnsupportedType(content_type)
    if size > policy.max_bytes:
        raise TooLarge(policy.max_bytes)
    return policy


@dataclass
class PendingUpload:
    """An upload read into memory and validated, not yet written to disk."""

    kind: UploadKind
    data: bytes
    content_type: str
    original_name: Optional[str]


async def read_upload(file: UploadFile, kind: UploadKind) -> PendingUpload:
    policy = POLICIES[kind]
    # Reject by declared type before pulling the body.
    validate_upload(file.content_type, 0, kind)
    data = await file.read(policy.max_bytes + 1)
    validate_upload(file.content_type, len(data), kind)
    return PendingUpload(
        kind=kind, data=data, content_type=file.content_type, original_name=file.filename
    )


async def read_optional_upload(
    file: Optional[UploadFile], kind: UploadKind
) -> Optional[PendingUpload]:
    """``read_upload`` for optional form fields; an empty file part counts as absent."""
    if file is None or not file.filename:
        return None
    return await read_upload(file, kind)


async def read_uploads(files: Sequence[UploadFile], kind: UploadKind) -> list[PendingUpload]:
    files = [f for f in files if f.filename]
    if not files:
        raise ValidationError("No files were uploaded", field="files")
    if len(files) > MAX_FILES:
        raise TooManyFiles(MAX_FILES)
    return [await read_upload(f, kind) for f in files]


def _extension(original_name: Optional[str], content_type: str) -> str:
    suffix = Path(original_name or "").suffix.lower()
    if suffix in ALLOWED_EXTENSIONS:
        return suffix
    return ALLOWED_CONTENT_TYPES[content_type.lower()]


class UploadStorage:
    """Writes uploads below ``root``; the root is served at ``/uploads``."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def ensure_dirs(self) -> None:
        for policy in POLICIES.values():
            (self.root / policy.subdir).mkdir(parents=True, exist_ok=True)

    def save_bytes(
        self,
        data: bytes,
        *,
        kind: UploadKind,
        content_type: Optional[str],
        original_name: Optional[str] = None,
    ) -> StoredFile:
        policy = validate_upload(content_type, len(data), kind)

        filename = (
            f"{policy.prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"
            f"{_extension(original_name, content_type)}"
        )
        target_dir = self.root / policy.subdir
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / filename).write_bytes(data)

        logger.info("Stored %s upload %s (%d bytes)", kind.value, filename, len(data))
        return StoredFile(
            url=f"{URL_PREFIX}/{policy.subdir}/{filename}",
            filename=filename,
            original_name=original_name,
            size=len(data),
            mimetype=content_type.lower(),
        )

    def store(self, pending: PendingUpload) -> StoredFile:
        return self.save_bytes(
            pending.data,
            kind=pending.kind,
            content_type=pending.content_type,
            original_name=pending.original_name,
        )

    async def accept(self, file: UploadFile, kind: UploadKind) -> StoredFile:
        pending = await read_upload(file, kind)
        return await run_in_threadpool(self.store, pending)

    async def accept_many(self, files: Sequence[UploadFile], kind: UploadKind) -> list[StoredFile]:
        """Validate every file first, then write them all."""
        pending = await read_uploads(files, kind)
        return await run_in_threadpool(lambda: [self.store(p) for p in pending])

    def path_for(self, url: str) -> Optional[Path]:
        """Filesystem path for a stored ``/uploads/...`` URL, None if outside the root."""
        if not url or not url.startswith(URL_PREFIX + "/"):
            return None
        root = self.root.resolve()
        path = (root / url[len(URL_PREFIX) + 1:]).resolve()
        if root not in path.parents:
            return None
        return path

    def remove(self, url: Optional[str]) -> bool:
        path = self.path_for(url or "")
        if path is None or not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not remove stored file %s: %s", path, exc)
            return False
        logger.info("Removed stored file %s", path)
        return True
