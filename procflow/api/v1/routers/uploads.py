"""Upload endpoint."""

from fastapi import APIRouter, Depends

from procflow.api.v1.dependencies import Actor, get_current_actor, get_upload_store
from procflow.api.v1.schemas import ErrorResponse, UploadRequest, UploadResponse
from procflow.integrations.uploads import UploadStore
from procflow.settings import Settings, get_settings


router = APIRouter(prefix="/upload", tags=["uploads"])


@router.post(
    "",
    response_model=UploadResponse,
    summary="Upload a file",
    description="Stores a base64 data URL and returns the server-assigned name.",
    responses={502: {"model": ErrorResponse, "description": "Storage failed"}},
)
async def upload_file(
    request: UploadRequest,
    store: UploadStore = Depends(get_upload_store),
    settings: Settings = Depends(get_settings),
    actor: Actor = Depends(get_current_actor),
) -> UploadResponse:
    result = await store.upload(request.filename, request.content, request.type)
    prefix = settings.upload_url_prefix.rstrip("/")
    return UploadResponse(filename=result.filename, url=f"{prefix}/{result.filename}")
