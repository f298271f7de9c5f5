from fastapi import Request

from handwerk.errors import UpstreamError
from handwerk.services.featured import FeaturedSlotWriter
from handwerk.services.uploads import UploadService


def get_uploads(request: Request) -> UploadService:
    return request.app.state.uploads


def get_featured_writer(request: Request) -> FeaturedSlotWriter:
    writer = request.app.state.featured
    if writer is None:
        raise UpstreamError("Database not configured")
    return writer
