"""AI document analysis endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.document import AnalyzeDocumentRequest, AnalyzeDocumentResponse
from app.services.document_analysis_service import get_document_analysis_service
from app.utils.permissions import require_authenticated

router = APIRouter()


@router.post("/analyze-document", response_model=AnalyzeDocumentResponse)
@require_authenticated()
async def analyze_document(
    request: AnalyzeDocumentRequest,
    db: AsyncSession = Depends(get_db),
):
    """Classify a document image, transcribe it and extract its key fields.

    Given a documentId, the analysis is also stored on that document.
    Gateway failures answer {"success": false, "error": ...} with 429, 402 or 500.
    """
    analysis = await get_document_analysis_service().analyze(db, request)
    return AnalyzeDocumentResponse(success=True, analysis=analysis)
