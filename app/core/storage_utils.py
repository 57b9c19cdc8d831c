# app/core/storage_utils.py
import re
import uuid

from app.core.config import get_settings
from app.core.supabase_client import supabase_admin

settings = get_settings()

BUCKET = settings.CHECK_IN_PHOTO_BUCKET


class StorageError(RuntimeError):
    """Raised when Supabase Storage refuses or fails an operation."""


def _bucket():
    # The admin client is created on first use so the app can boot
    # (and tests can run) without a service role key.
    return supabase_admin().storage.from_(BUCKET)


def _is_bucket_missing(message: str | None) -> bool:
    """Check if a Supabase storage error says the bucket does not exist."""
    if not message:
        return False
    lower = message.lower()
    return (
        "bucket not found" in lower
        or "the related resource does not exist" in lower
        or ("not found" in lower and "bucket" in lower)
    )


def _signed_url_from(data: dict) -> str | None:
    # storage3 has shipped several spellings of this key across versions
    for key in ("signedUrl", "signedURL", "signed_url"):
        if data.get(key):
            return data[key]
    return None


def sanitize_filename(name: str) -> str:
    """
    Keep a client-supplied file name safe to use inside an object path.

    Example:
        "../My photo (1).JPG" -> "My-photo-1-.JPG"
    """
    name = name.rsplit("/", 1)[-1].strip()
    name = re.sub(r"[^A-Za-z0-9._-]+", "-", name)
    name = name.lstrip(".-")
    return name[:100] or "photo"


def build_upload_paths(user_id: uuid.UUID, file_names: list[str]) -> list[str]:
    """
    Object paths for one upload batch.

    Layout: "<user_id>/<batch_uuid>/<index>-<file name>"
    """
    batch_id = uuid.uuid4()
    return [
        f"{user_id}/{batch_id}/{i}-{sanitize_filename(name)}"
        for i, name in enumerate(file_names)
    ]


def path_belongs_to(user_id: uuid.UUID, path: str) -> bool:
    """True if the object path lives under the user's own prefix."""
    return path.startswith(f"{user_id}/") and ".." not in path


def issue_signed_upload_urls(paths: list[str]) -> list[dict[str, str]]:
    """
    Create one signed upload URL per object path.

    Returns:
        [{"path": ..., "signed_url": ..., "token": ...}, ...]

    Raises:
        StorageError: if the bucket is missing or Supabase rejects a path.
    """
    results: list[dict[str, str]] = []
    for path in paths:
        try:
            data = _bucket().create_signed_upload_url(path)
        except Exception as exc:
            if _is_bucket_missing(str(exc)):
                raise StorageError(
                    f'Storage bucket "{BUCKET}" not found. Create it in the '
                    f'Supabase dashboard (Storage -> New bucket -> "{BUCKET}", private).'
                ) from exc
            raise StorageError(f"Failed to create upload URL for {path}: {exc}") from exc

        signed_url = _signed_url_from(data)
        if not signed_url:
            raise StorageError(f"Failed to create upload URL for {path}")

        results.append(
            {
                "path": path,
                "signed_url": signed_url,
                "token": data.get("token", ""),
            }
        )
    return results


def issue_signed_download_url(path: str, ttl_seconds: int | None = None) -> str:
    """
    Short-lived download URL for a private object.

    Only the storage path is ever persisted; URLs are minted on read.
    """
    ttl = ttl_seconds or settings.SIGNED_URL_TTL_SECONDS
    try:
        data = _bucket().create_signed_url(path, ttl)
    except Exception as exc:
        raise StorageError(f"Failed to get download URL: {exc}") from exc

    signed_url = _signed_url_from(data)
    if not signed_url:
        raise StorageError(f"Failed to get download URL for {path}")
    return signed_url
