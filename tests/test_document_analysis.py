# /tests/test_document_analysis.py

import json
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.config import settings
from app.exceptions import (
    AIGatewayError,
    CreditsExhaustedError,
    NotFoundException,
    RateLimitedError,
)
from app.models.document import DocumentType
from app.schemas.document import AnalyzeDocumentRequest
from app.services.document_analysis_service import (
    FALLBACK_CONFIDENCE,
    PENDING_TEXT,
    TOOL_NAME,
    DocumentAnalysisService,
    analysis_metadata,
    build_gateway_payload,
    fallback_analysis,
    normalize_analysis,
    parse_gateway_response,
)

RAW_ANALYSIS = {
    "document_type": "birth_certificate",
    "extracted_text": "CERTIFICATE OF LIVE BIRTH ...",
    "summary": "Birth certificate of Liam Cruz.",
    "keywords": ["birth", "certificate", "Liam Cruz"],
    "personal_info": {"full_name": "Liam Cruz", "birth_date": "2019-02-11"},
    "language": "English",
    "confidence": 0.92,
}


def _tool_call_body(arguments) -> dict:
    return {
        "choices": [{
            "message": {
                "content": None,
                "tool_calls": [{"type": "function", "function": {"name": TOOL_NAME, "arguments": arguments}}],
            }
        }]
    }


def _content_body(content) -> dict:
    return {"choices": [{"message": {"content": content}}]}


def _request(**overrides) -> AnalyzeDocumentRequest:
    data = {"imageUrl": "https://files.example.com/birth.jpg", "originalFilename": "birth_cert.jpg"}
    data.update(overrides)
    return AnalyzeDocumentRequest(**data)


# === Payload and parsing ===

def test_request_accepts_camel_case_and_field_names():
    document_id = uuid.uuid4()
    by_alias = AnalyzeDocumentRequest(documentId=str(document_id), imageUrl="u", mimeType="image/png")
    by_name = AnalyzeDocumentRequest(document_id=document_id, image_url="u")

    assert by_alias.document_id == by_name.document_id == document_id
    assert by_alias.mime_type == "image/png"
    assert by_name.original_filename == "document"


def test_gateway_payload_forces_the_analysis_tool():
    payload = build_gateway_payload(_request(mimeType="image/jpeg"), "test-model")

    assert payload["model"] == "test-model"
    assert payload["tool_choice"] == {"type": "function", "function": {"name": TOOL_NAME}}
    user_content = payload["messages"][1]["content"]
    assert "birth_cert.jpg" in user_content[0]["text"]
    assert "image/jpeg" in user_content[0]["text"]
    assert user_content[1]["image_url"]["url"] == "https://files.example.com/birth.jpg"


def test_parse_tool_call_arguments_string():
    analysis = parse_gateway_response(_tool_call_body(json.dumps(RAW_ANALYSIS)), "birth_cert.jpg")

    assert analysis.document_type == DocumentType.BIRTH_CERTIFICATE
    assert analysis.metadata.confidence == 0.92
    assert analysis.metadata.personal_info["full_name"] == "Liam Cruz"
    assert analysis.suggested_filename == "birth_cert.jpg"


def test_tool_call_wins_over_content():
    """Structured tool arguments take precedence over free-text content."""
    body = _tool_call_body(RAW_ANALYSIS)
    body["choices"][0]["message"]["content"] = json.dumps({"document_type": "diploma"})

    analysis = parse_gateway_response(body, "birth_cert.jpg")
    assert analysis.document_type == DocumentType.BIRTH_CERTIFICATE


def test_parse_fenced_json_content():
    content = "```json\n" + json.dumps({**RAW_ANALYSIS, "document_type": "report_card"}) + "\n```"
    analysis = parse_gateway_response(_content_body(content), "card.png")
    assert analysis.document_type == DocumentType.REPORT_CARD


def test_non_json_content_falls_back_with_text():
    analysis = parse_gateway_response(_content_body("This looks like a report card."), "card.png")

    assert analysis.document_type == DocumentType.OTHER
    assert analysis.metadata.confidence == FALLBACK_CONFIDENCE
    assert analysis.extracted_text == "This looks like a report card."
    assert analysis.summary == "Document uploaded: card.png"
    assert analysis.keywords == ["card"]


def test_empty_response_falls_back():
    analysis = parse_gateway_response({"choices": []}, "scan.pdf")
    assert analysis.extracted_text == PENDING_TEXT
    assert analysis.metadata.language == "Unknown"


def test_fallback_truncates_long_text():
    analysis = fallback_analysis("notes.txt", "x" * 6000)
    assert len(analysis.extracted_text) == 5000


def test_normalize_analysis_coerces_loose_output():
    """Unknown types, out-of-range confidence and comma-separated keywords are tidied up."""
    analysis = normalize_analysis(
        {"document_type": "passport", "confidence": 1.7, "keywords": "passport, travel, ", "personal_info": "n/a"},
        "passport.jpg",
    )

    assert analysis.document_type == DocumentType.OTHER
    assert analysis.metadata.confidence == 1.0
    assert analysis.keywords == ["passport", "travel"]
    assert analysis.metadata.personal_info == {}

    assert normalize_analysis({"confidence": "high"}, "a.jpg").metadata.confidence == 0.5
    assert normalize_analysis({"confidence": -3}, "a.jpg").metadata.confidence == 0.0
    assert normalize_analysis({"document_type": " Diploma "}, "a.jpg").document_type == DocumentType.DIPLOMA


def test_normalize_analysis_reads_nested_metadata():
    raw = {
        "document_type": "transcript",
        "metadata": {"language": "Filipino", "confidence": 0.7, "detected_fields": ["gwa"], "academic_info": {"gwa": "1.5"}},
    }

    metadata = normalize_analysis(raw, "tor.pdf").metadata

    assert (metadata.language, metadata.confidence) == ("Filipino", 0.7)
    assert metadata.detected_fields == ["gwa"]
    assert metadata.academic_info == {"gwa": "1.5"}


def test_analysis_metadata_records_provider():
    metadata = analysis_metadata(normalize_analysis(RAW_ANALYSIS, "birth_cert.jpg"))
    assert metadata["confidence"] == 0.92
    assert metadata["language"] == "English"
    assert {"ai_provider", "ai_model"} <= set(metadata)


# === Gateway calls ===

def _service(handler) -> DocumentAnalysisService:
    return DocumentAnalysisService(transport=httpx.MockTransport(handler))


async def test_call_gateway_sends_bearer_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["authorization"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_tool_call_body(json.dumps(RAW_ANALYSIS)))

    with patch.object(settings, "ai_gateway_api_key", "gateway-key"):
        body = await _service(handler)._call_gateway({"model": "m"})

    assert seen["authorization"] == "Bearer gateway-key"
    assert seen["body"] == {"model": "m"}
    assert "choices" in body


@pytest.mark.parametrize(
    "status_code, error, expected_status",
    [(429, RateLimitedError, 429), (402, CreditsExhaustedError, 402), (500, AIGatewayError, 500), (400, AIGatewayError, 500)],
)
async def test_call_gateway_maps_error_statuses(status_code, error, expected_status):
    service = _service(lambda request: httpx.Response(status_code, text="nope"))

    with patch.object(settings, "ai_gateway_api_key", "gateway-key"):
        with pytest.raises(error) as exc_info:
            await service._call_gateway({})

    assert exc_info.value.status_code == expected_status


async def test_call_gateway_requires_api_key():
    service = _service(lambda request: httpx.Response(200, json={}))
    with patch.object(settings, "ai_gateway_api_key", ""):
        with pytest.raises(AIGatewayError):
            await service._call_gateway({})


async def test_call_gateway_wraps_transport_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with patch.object(settings, "ai_gateway_api_key", "gateway-key"):
        with pytest.raises(AIGatewayError):
            await _service(handler)._call_gateway({})


async def test_call_gateway_rejects_invalid_json():
    service = _service(lambda request: httpx.Response(200, text="<html>"))
    with patch.object(settings, "ai_gateway_api_key", "gateway-key"):
        with pytest.raises(AIGatewayError):
            await service._call_gateway({})


# === analyze() ===

async def test_analyze_unknown_document_skips_gateway():
    """A missing document is reported before any gateway call is made."""
    service = DocumentAnalysisService()
    db = MagicMock()
    db.get = AsyncMock(return_value=None)

    with patch.object(service, "_call_gateway", AsyncMock()) as call_gateway:
        with pytest.raises(NotFoundException):
            await service.analyze(db, _request(documentId=str(uuid.uuid4())))

    call_gateway.assert_not_awaited()


async def test_analyze_saves_result_on_document():
    service = DocumentAnalysisService()
    document = SimpleNamespace(id=uuid.uuid4(), document_type=None, ai_metadata=None)
    db = MagicMock()
    db.get = AsyncMock(return_value=document)
    db.commit = AsyncMock()
    manager = MagicMock()
    manager.notify_change = AsyncMock()

    with patch.object(service, "_call_gateway", AsyncMock(return_value=_tool_call_body(RAW_ANALYSIS))), \
         patch("app.services.document_analysis_service.get_connection_manager", return_value=manager):
        analysis = await service.analyze(db, _request(documentId=str(document.id)))

    assert analysis.document_type == DocumentType.BIRTH_CERTIFICATE
    assert document.document_type == "birth_certificate"
    assert document.ai_summary == "Birth certificate of Liam Cruz."
    assert document.ai_metadata["keywords"] == ["birth", "certificate", "Liam Cruz"]
    assert document.ai_processed_at is not None
    db.commit.assert_awaited_once()
    manager.notify_change.assert_awaited_once_with("documents", "update", document.id)


async def test_analyze_without_document_id_does_not_touch_db():
    service = DocumentAnalysisService()
    db = MagicMock()
    db.get = AsyncMock()

    with patch.object(service, "_call_gateway", AsyncMock(return_value=_content_body("plain text"))):
        analysis = await service.analyze(db, _request())

    assert analysis.metadata.confidence == FALLBACK_CONFIDENCE
    db.get.assert_not_awaited()
