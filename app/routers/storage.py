# app/routers/storage.py
from fastapi import APIRouter, Depends

from app.core import storage_utils
from app.core.auth import require_client
from app.models.user import User
from app.schemas.storage import SignedUploadRead, UploadUrlRequest

router = APIRouter(prefix="/storage", tags=["Storage"])


@router.post("/upload-urls", response_model=list[SignedUploadRead])
def create_upload_urls(
    payload: UploadUrlRequest,
    current_user: User = Depends(require_client),
):
    """
    Signed upload URLs for check-in photos.

    The returned `path` values go into `photo_paths` when submitting.
    """
    paths = storage_utils.build_upload_paths(current_user.id, payload.file_names)
    return storage_utils.issue_signed_upload_urls(paths)
