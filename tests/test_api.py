# /tests/test_api.py

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from app.exceptions import ConflictException, CreditsExhaustedError, RateLimitedError
from app.models.document import DocumentType
from app.schemas.document import AnalysisMetadata, DocumentAnalysis
from app.services.report_service import build_teacher_report


def _scalars(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_finance_requires_authentication(client):
    response = client.get("/api/v1/finance/overview")
    assert response.status_code == 401
    assert response.json()["status"] == "error"


def test_finance_forbidden_for_teachers(client, auth_headers):
    response = client.get("/api/v1/finance/overview", headers=auth_headers("teacher"))
    assert response.status_code == 403


def test_finance_overview_totals(client, db_session, auth_headers):
    """Overview totals come back rounded, with currency-formatted display strings."""
    db_session.execute = AsyncMock(side_effect=[
        _scalars([
            SimpleNamespace(amount=Decimal("1200.50"), status="paid"),
            SimpleNamespace(amount=Decimal("300"), status="pending"),
        ]),
        _scalars([SimpleNamespace(amount=Decimal("200"), status="approved")]),
        _scalars([SimpleNamespace(salary=Decimal("5000"), basic_salary=None, status="active")]),
    ])

    response = client.get("/api/v1/finance/overview", headers=auth_headers("accounting"))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_collected"] == 1200.5
    assert data["total_pending"] == 300.0
    assert data["net_income"] == 1000.5
    assert data["active_employees"] == 1
    assert data["display"]["total_collected"] == "AED 1,200.50"


def test_payroll_conflict_returns_409(client, auth_headers):
    service = MagicMock()
    service.run_payroll = AsyncMock(side_effect=ConflictException("Payroll has already been processed for this period"))

    with patch("app.api.v1.finance.get_finance_service", return_value=service):
        response = client.post(
            "/api/v1/finance/payroll",
            json={"period_start": "2026-03-01", "period_end": "2026-03-31"},
            headers=auth_headers("principal"),
        )

    assert response.status_code == 409
    assert response.json()["message"] == "Payroll has already been processed for this period"


def test_report_csv_export(client, auth_headers):
    service = MagicMock()
    service.build = AsyncMock(return_value=build_teacher_report([
        SimpleNamespace(employment_type="full_time", department="Science", is_active=True),
    ]))

    with patch("app.api.v1.reports.get_report_service", return_value=service):
        response = client.get("/api/v1/reports/teachers/export.csv", headers=auth_headers("registrar"))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="teachers-report-2025-2026.csv"' in response.headers["content-disposition"]
    assert response.text.splitlines()[0] == "metric,value"
    assert "department,count" in response.text


def test_unknown_report_type_is_rejected(client, auth_headers):
    response = client.get("/api/v1/reports/gossip", headers=auth_headers())
    assert response.status_code == 422


# === Document analysis ===

def _analysis_service(**kwargs):
    service = MagicMock()
    service.analyze = AsyncMock(**kwargs)
    return service


def test_analyze_document_success(client, auth_headers):
    analysis = DocumentAnalysis(
        document_type=DocumentType.REPORT_CARD,
        extracted_text="Report card",
        summary="Quarter 1 report card.",
        keywords=["report", "card"],
        metadata=AnalysisMetadata(
            academic_info={"quarter": "Q1"},
            detected_fields=["grades"],
            language="English",
            confidence=0.8,
        ),
    )
    service = _analysis_service(return_value=analysis)

    with patch("app.api.v1.analyze_document.get_document_analysis_service", return_value=service):
        response = client.post(
            "/api/v1/analyze-document",
            json={"imageUrl": "https://files.example.com/card.png", "originalFilename": "card.png"},
            headers=auth_headers("registrar"),
        )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["analysis"]["document_type"] == "report_card"
    assert body["analysis"]["metadata"] == {
        "personal_info": {},
        "academic_info": {"quarter": "Q1"},
        "detected_fields": ["grades"],
        "language": "English",
        "confidence": 0.8,
    }
    assert "confidence" not in body["analysis"]
    request = service.analyze.await_args.args[1]
    assert request.original_filename == "card.png"


def test_analyze_document_requires_authentication(client):
    response = client.post("/api/v1/analyze-document", json={"imageUrl": "https://x/y.png"})
    assert response.status_code == 401


def test_analyze_document_requires_image_url(client, auth_headers):
    response = client.post("/api/v1/analyze-document", json={"originalFilename": "a.png"}, headers=auth_headers())
    assert response.status_code == 422


def test_analyze_document_rate_limited(client, auth_headers):
    """Gateway rate limits surface as 429 with the analysis error shape."""
    service = _analysis_service(side_effect=RateLimitedError())

    with patch("app.api.v1.analyze_document.get_document_analysis_service", return_value=service):
        response = client.post(
            "/api/v1/analyze-document",
            json={"imageUrl": "https://files.example.com/card.png"},
            headers=auth_headers("teacher"),
        )

    assert response.status_code == 429
    assert response.json() == {"success": False, "error": "Rate limit exceeded. Please try again later."}


def test_analyze_document_credits_exhausted(client, auth_headers):
    service = _analysis_service(side_effect=CreditsExhaustedError())

    with patch("app.api.v1.analyze_document.get_document_analysis_service", return_value=service):
        response = client.post(
            "/api/v1/analyze-document",
            json={"imageUrl": "https://files.example.com/card.png"},
            headers=auth_headers(),
        )

    assert response.status_code == 402
    assert response.json()["success"] is False
