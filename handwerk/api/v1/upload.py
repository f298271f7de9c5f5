"""
Generic image upload endpoint
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from handwerk.api.deps import get_uploads
from handwerk.auth import require_admin
from handwerk.schemas import UploadResponse
from handwerk.services.uploads import UploadService
from handwerk.utils.paths import abs_url

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResponse, dependencies=[Depends(require_admin)])
async def upload(request: Request, file: Optional[UploadFile] = File(None), uploads: UploadService = Depends(get_uploads)):
    """Optimize one image, store it and return where it lives."""
    stored = await uploads.store_image(file)
    return UploadResponse(
        path=stored.path,
        bucket=uploads.storage.bucket,
        url=abs_url(request, stored.url),
        originalSize=stored.original_size,
        optimizedSize=stored.stored_size,
        compressionRatio=round(stored.compression_ratio, 1),
    )
