"""Profile picture upload validation and storage."""

import logging
import os
import uuid
from pathlib import Path

from fastapi import UploadFile

from app.config import get_settings
from app.errors import InvalidInputError

logger = logging.getLogger("account_service")

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
AVATAR_SUBDIR = "avatars"
AVATAR_URL_PREFIX = "/uploads/avatars/"


class AvatarService:
    """Stores profile pictures under UPLOAD_DIR/avatars."""

    def validate_upload_metadata(self, filename: str, content_type: str | None) -> None:
        """Reject uploads that are not images. Raises InvalidInputError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise InvalidInputError(f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}")

        if content_type and not content_type.startswith("image/"):
            raise InvalidInputError(f"Invalid content type '{content_type}'. Must be an image.")

    def avatar_dir(self) -> Path:
        return Path(get_settings().UPLOAD_DIR) / AVATAR_SUBDIR

    async def store(self, user_id: int, upload: UploadFile) -> str:
        """Stream the upload to disk with a size limit. Returns the public URL of the stored file."""
        settings = get_settings()
        max_bytes = settings.MAX_AVATAR_SIZE_MB * 1024 * 1024
        ext = Path(upload.filename or "avatar.bin").suffix.lower()
        stored_filename = f"{user_id}_{uuid.uuid4().hex}{ext}"
        target_dir = self.avatar_dir()
        target_dir.mkdir(parents=True, exist_ok=True)

        file_path = target_dir / stored_filename
        file_size = 0
        chunk_size = 1024 * 64

        try:
            with open(file_path, "wb") as f:
                while True:
                    chunk = await upload.read(chunk_size)
                    if not chunk:
                        break
                    file_size += len(chunk)
                    if file_size > max_bytes:
                        raise InvalidInputError(f"File too large. Maximum: {settings.MAX_AVATAR_SIZE_MB}MB")
                    f.write(chunk)
        except InvalidInputError:
            if file_path.exists():
                os.remove(file_path)
            raise

        if file_size == 0:
            os.remove(file_path)
            raise InvalidInputError("Uploaded file is empty")

        return AVATAR_URL_PREFIX + stored_filename

    def delete(self, picture_url: str | None) -> None:
        """Remove a previously stored picture. URLs not managed here are ignored."""
        if not picture_url or not picture_url.startswith(AVATAR_URL_PREFIX):
            return
        file_path = self.avatar_dir() / Path(picture_url).name
        if file_path.exists():
            os.remove(file_path)
            logger.info("Removed old profile picture %s", file_path.name)


_avatar_service: AvatarService | None = None


def get_avatar_service() -> AvatarService:
    """Get singleton avatar service instance."""
    global _avatar_service
    if _avatar_service is None:
        _avatar_service = AvatarService()
    return _avatar_service
