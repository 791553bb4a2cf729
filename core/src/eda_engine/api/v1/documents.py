import logging

from fastapi import APIRouter, Depends, HTTPException

from ...schemas.document import AddDocumentsResponse, Document
from ...services.document_store import DocumentStore
from ..dependencies import get_document_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post("", response_model=AddDocumentsResponse)
async def add_documents(
    documents: list[Document],
    store: DocumentStore = Depends(get_document_store),
):
    """Add already-chunked passages to the similarity-search store."""
    try:
        added = await store.add_documents(documents)
    except Exception as e:
        logger.error("Adding documents failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    return AddDocumentsResponse(added=added)
