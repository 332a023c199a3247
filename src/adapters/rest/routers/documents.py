"""Document upload: PDFs are chunked, embedded and indexed for the uploader."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from factory import ServiceFactory
from adapters.rest.dependencies import CurrentUser, get_current_user, get_factory
from adapters.rest.schemas import IngestionOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/upload", response_model=IngestionOut, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    content = await file.read()
    logger.info("Upload from user %d: %s (%d bytes)", user.user_id, file.filename, len(content))

    service = factory.create_document_ingestion_service()
    result = await service.ingest_pdf(user.user_id, file.filename or "", content)
    return IngestionOut(
        file_name=result.file_name,
        chunks_stored=result.chunks_stored,
        message=result.message,
    )
