from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.core.storage import ObjectStorage, get_storage
from .service import MediaService

router = APIRouter()

def get_media_service(storage: ObjectStorage = Depends(get_storage)) -> MediaService:
    return MediaService(storage)

@router.get("/{path:path}")
def serve_media(path: str, media_service: MediaService = Depends(get_media_service)):
    """Serve a stored image when the bucket has no public URL (or in local mode)"""
    content, content_type = media_service.get_media(path)
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )
