"""AI document analysis through an OpenAI-compatible chat-completions gateway."""

import json
import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    AIGatewayError,
    CreditsExhaustedError,
    NotFoundException,
    RateLimitedError,
)
from app.models import Document
from app.models.document import DocumentType
from app.schemas.document import AnalysisMetadata, AnalyzeDocumentRequest, DocumentAnalysis
from app.services.realtime_service import get_connection_manager

logger = logging.getLogger(__name__)

TOOL_NAME = "analyze_document"
FALLBACK_CONFIDENCE = 0.3
DEFAULT_CONFIDENCE = 0.5
MAX_FALLBACK_TEXT = 5000
PENDING_TEXT = "Analysis pending - document uploaded successfully"

SYSTEM_PROMPT = """You are an expert document analyzer for a school management system.
Analyze the document image and extract all relevant information:
1. Identify the document type.
2. Extract ALL visible text.
3. Write a 2-3 sentence summary.
4. Extract 5-10 keywords for search and filtering.
5. Identify key fields (names, dates, ID numbers, addresses, grades, schools).
6. Detect the primary language (English, Tagalog, Arabic, ...).
7. Give a confidence score between 0.0 and 1.0.
8. Suggest a meaningful filename based on the content.
Report the result by calling the analyze_document tool."""

ANALYSIS_TOOL = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Report the structured analysis of a school document.",
        "parameters": {
            "type": "object",
            "properties": {
                "document_type": {"type": "string", "enum": [t.value for t in DocumentType]},
                "extracted_text": {"type": "string"},
                "summary": {"type": "string"},
                "keywords": {"type": "array", "items": {"type": "string"}},
                "personal_info": {
                    "type": "object",
                    "properties": {
                        "full_name": {"type": "string"},
                        "birth_date": {"type": "string"},
                        "gender": {"type": "string"},
                        "address": {"type": "string"},
                        "id_number": {"type": "string"},
                    },
                },
                "academic_info": {
                    "type": "object",
                    "properties": {
                        "school_name": {"type": "string"},
                        "grade_level": {"type": "string"},
                        "school_year": {"type": "string"},
                        "grades": {"type": "string"},
                        "courses": {"type": "string"},
                    },
                },
                "detected_fields": {"type": "array", "items": {"type": "string"}},
                "language": {"type": "string"},
                "confidence": {"type": "number", "minimum": 0, "maximum": 1},
                "suggested_filename": {"type": "string"},
            },
            "required": ["document_type", "extracted_text", "summary", "keywords", "confidence"],
        },
    },
}


def build_gateway_payload(request: AnalyzeDocumentRequest, model: str) -> dict[str, Any]:
    """Chat-completions request forcing the analysis tool."""
    prompt = (
        f'Analyze this document from a student file. Original filename: "{request.original_filename}".'
    )
    if request.mime_type:
        prompt += f" MIME type: {request.mime_type}."
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": request.image_url}},
                ],
            },
        ],
        "tools": [ANALYSIS_TOOL],
        "tool_choice": {"type": "function", "function": {"name": TOOL_NAME}},
    }


def filename_stem(filename: str) -> str:
    return filename.split(".")[0] or filename


def fallback_analysis(original_filename: str, text: str | None = None) -> DocumentAnalysis:
    """Low-confidence analysis used when the model returned no usable JSON."""
    return DocumentAnalysis(
        document_type=DocumentType.OTHER,
        extracted_text=text[:MAX_FALLBACK_TEXT] if text else PENDING_TEXT,
        summary=f"Document uploaded: {original_filename}",
        keywords=[filename_stem(original_filename)],
        metadata=AnalysisMetadata(language="Unknown", confidence=FALLBACK_CONFIDENCE),
        suggested_filename=original_filename,
    )


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return [str(value)]


def _confidence(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if confidence != confidence:  # NaN
        return DEFAULT_CONFIDENCE
    return min(max(confidence, 0.0), 1.0)


def normalize_analysis(raw: dict[str, Any], original_filename: str) -> DocumentAnalysis:
    """Coerce a model's raw output into a valid analysis.

    Metadata fields are read from a nested "metadata" object when the model
    sends one, otherwise from the top level.
    """
    nested = raw.get("metadata")
    details = nested if isinstance(nested, dict) else raw
    personal = details.get("personal_info")
    academic = details.get("academic_info")
    return DocumentAnalysis(
        document_type=DocumentType.coerce(raw.get("document_type")),
        extracted_text=str(raw.get("extracted_text") or ""),
        summary=str(raw.get("summary") or ""),
        keywords=_string_list(raw.get("keywords")),
        metadata=AnalysisMetadata(
            personal_info=personal if isinstance(personal, dict) else {},
            academic_info=academic if isinstance(academic, dict) else {},
            detected_fields=_string_list(details.get("detected_fields")),
            language=str(details.get("language") or "Unknown"),
            confidence=_confidence(details.get("confidence")),
        ),
        suggested_filename=str(raw.get("suggested_filename") or original_filename),
    )


def _load_json_object(text: str) -> dict[str, Any] | None:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    try:
        parsed = json.loads(cleaned)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_gateway_response(body: dict[str, Any], original_filename: str) -> DocumentAnalysis:
    """Analysis from a chat-completions body.

    Tool-call arguments win over message content; unusable output falls
    back to a low-confidence analysis.
    """
    choices = body.get("choices") or [{}]
    message = (choices[0] or {}).get("message") or {}

    for call in message.get("tool_calls") or []:
        function = call.get("function") or {}
        if function.get("name", TOOL_NAME) != TOOL_NAME:
            continue
        arguments = function.get("arguments")
        raw = arguments if isinstance(arguments, dict) else _load_json_object(arguments or "")
        if raw is not None:
            return normalize_analysis(raw, original_filename)

    content = message.get("content")
    if isinstance(content, str) and content.strip():
        raw = _load_json_object(content)
        if raw is not None:
            return normalize_analysis(raw, original_filename)
        logger.warning("AI gateway returned non-JSON content, using fallback analysis")
        return fallback_analysis(original_filename, content)

    logger.info("No content in AI gateway response, using fallback analysis")
    return fallback_analysis(original_filename)


def analysis_metadata(analysis: DocumentAnalysis) -> dict[str, Any]:
    """The ai_metadata stored on a document."""
    return {
        "keywords": analysis.keywords,
        **analysis.metadata.model_dump(),
        "suggested_filename": analysis.suggested_filename,
        "ai_provider": settings.ai_provider_name,
        "ai_model": settings.ai_gateway_model,
    }


class DocumentAnalysisService:
    """Service classifying and transcribing document images through the AI gateway."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    async def _call_gateway(self, payload: dict[str, Any]) -> dict[str, Any]:
        if not settings.ai_gateway_api_key:
            raise AIGatewayError("AI gateway API key is not configured")

        try:
            async with httpx.AsyncClient(
                timeout=settings.ai_gateway_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    settings.ai_gateway_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {settings.ai_gateway_api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"AI gateway request failed: {e}")
            raise AIGatewayError(f"AI gateway request failed: {e}")

        if response.status_code == 429:
            raise RateLimitedError()
        if response.status_code == 402:
            raise CreditsExhaustedError()
        if response.status_code >= 400:
            logger.error(f"AI gateway error: {response.status_code} - {response.text[:500]}")
            raise AIGatewayError(f"AI gateway error: {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            raise AIGatewayError("AI gateway returned an invalid response")
        if not isinstance(body, dict):
            raise AIGatewayError("AI gateway returned an invalid response")
        return body

    async def analyze(self, db: AsyncSession, request: AnalyzeDocumentRequest) -> DocumentAnalysis:
        """Analyze a document image and, given a document id, store the result on it."""
        document = None
        if request.document_id:
            document = await db.get(Document, request.document_id)
            if not document:
                raise NotFoundException("Document")

        logger.info(f"Analyzing document {request.document_id or '-'} ({request.original_filename})")
        body = await self._call_gateway(build_gateway_payload(request, settings.ai_gateway_model))
        analysis = parse_gateway_response(body, request.original_filename)

        if document is not None:
            await self._save(db, document, analysis)
        return analysis

    async def _save(self, db: AsyncSession, document: Document, analysis: DocumentAnalysis) -> None:
        document.document_type = analysis.document_type.value
        document.ai_extracted_text = analysis.extracted_text
        document.ai_summary = analysis.summary
        document.ai_metadata = analysis_metadata(analysis)
        document.ai_processed_at = datetime.now(timezone.utc)

        await db.commit()
        logger.info(f"Saved analysis for document {document.id} as {analysis.document_type.value}")
        await get_connection_manager().notify_change("documents", "update", document.id)


# Singleton instance
_document_analysis_service: DocumentAnalysisService | None = None


def get_document_analysis_service() -> DocumentAnalysisService:
    """Get the document analysis service singleton."""
    global _document_analysis_service
    if _document_analysis_service is None:
        _document_analysis_service = DocumentAnalysisService()
    return _document_analysis_service
