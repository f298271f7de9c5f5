from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

from fastapi import UploadFile

from handwerk.config import Settings
from handwerk.errors import ValidationError
from handwerk.services.image_optimizer import (
    ImageFile,
    OptimizeOptions,
    format_file_size,
    optimize_many,
    validate_image_file,
)
from handwerk.utils.paths import object_path

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoredObject:
    path: str
    url: str
    original_size: int
    stored_size: int

    @property
    def compression_ratio(self) -> float:
        return (self.original_size - self.stored_size) / self.original_size * 100 if self.original_size else 0.0


class UploadService:
    """Validate, optimize and store uploaded images."""

    def __init__(self, storage, settings: Settings, executor: Optional[ThreadPoolExecutor] = None):
        self.storage = storage
        self.settings = settings
        self.executor = executor or ThreadPoolExecutor(max_workers=max(1, settings.OPTIMIZE_MAX_CONCURRENCY))
        self.options = OptimizeOptions(
            max_width=settings.IMAGE_MAX_WIDTH,
            max_height=settings.IMAGE_MAX_HEIGHT,
            quality=settings.IMAGE_QUALITY,
            format=settings.IMAGE_FORMAT,
        )

    @staticmethod
    async def read(upload: UploadFile) -> ImageFile:
        return ImageFile(
            filename=upload.filename or "upload",
            content=await upload.read(),
            content_type=upload.content_type or "",
        )

    async def store_images(self, uploads: Sequence[UploadFile]) -> List[StoredObject]:
        uploads = [u for u in uploads if u is not None and (u.filename or "")]
        if len(uploads) > self.settings.MAX_UPLOAD_FILES:
            raise ValidationError(f"At most {self.settings.MAX_UPLOAD_FILES} images per request")
        files = [await self.read(u) for u in uploads]
        for f in files:
            try:
                validate_image_file(f, self.settings.MAX_UPLOAD_MB)
            except ValidationError as exc:
                raise ValidationError(f"{f.filename}: {exc.message}") from exc

        loop = asyncio.get_running_loop()
        originals = [f.size for f in files]
        if self.settings.OPTIMIZE_UPLOADS and files:
            results = await loop.run_in_executor(None, optimize_many, files, self.options, self.executor)
            files = [r.file for r in results]

        stored: List[StoredObject] = []
        for f, original in zip(files, originals):
            path = object_path(f.filename)
            url = await loop.run_in_executor(self.executor, self.storage.put, path, f.content, f.content_type)
            logger.info("[upload] %s stored as %s (%s → %s)", f.filename, path,
                        format_file_size(original), format_file_size(f.size))
            stored.append(StoredObject(path=path, url=url, original_size=original, stored_size=f.size))
        return stored

    async def store_image(self, upload: UploadFile) -> StoredObject:
        stored = await self.store_images([upload])
        if not stored:
            raise ValidationError("No file uploaded")
        return stored[0]
