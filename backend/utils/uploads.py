from fastapi import UploadFile
from pathlib import Path
from typing import Optional
from config.settings import settings
from core.exceptions import ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
PUBLIC_PREFIX = "/uploads/"

# ============ Profile Images ============

def _reject(message: str):
    raise ValidationError([{"field": "profile_image", "message": message}])

def save_profile_image(upload: UploadFile, upload_dir: Optional[str] = None) -> str:
    """
    Validate and store an uploaded profile image.

    Returns:
        Public path of the stored file, e.g. "/uploads/profile-<hex>.png"

    Raises:
        ValidationError: Not an image, unsupported extension, or larger than MAX_UPLOAD_SIZE
    """
    extension = Path(upload.filename or "").suffix.lower()
    content_type = (upload.content_type or "").lower()

    if not content_type.startswith("image/") or extension not in ALLOWED_EXTENSIONS:
        _reject("Only image files (jpeg, jpg, png, gif, webp) are allowed")

    # One byte past the limit is enough to detect oversize files
    content = upload.file.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(content) > settings.MAX_UPLOAD_SIZE:
        _reject(f"Profile image must be at most {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB")
    if not content:
        _reject("Profile image is empty")

    target_dir = Path(upload_dir or settings.UPLOAD_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = f"profile-{uuid.uuid4().hex}{extension}"
    (target_dir / filename).write_bytes(content)

    logger.info(f"Profile image stored: {filename} ({len(content)} bytes)")
    return PUBLIC_PREFIX + filename

def discard_profile_image(public_path: Optional[str], upload_dir: Optional[str] = None) -> None:
    """Remove a stored image, e.g. when the signup it belonged to failed."""
    if not public_path or not public_path.startswith(PUBLIC_PREFIX):
        return

    target = Path(upload_dir or settings.UPLOAD_DIR) / public_path[len(PUBLIC_PREFIX):]
    try:
        target.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove profile image {target}: {str(e)}")
