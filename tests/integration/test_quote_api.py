"""Integration tests for the API endpoints.

These tests run the real FastAPI application, including its startup
lifespan, against the seeded in-memory rate table.
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from quote_engine.main import create_app
from quote_engine.models.quote import is_valid_quote_number

pytestmark = pytest.mark.integration

QUOTE_PAYLOAD = {
    "business_name": "Acme Software LLC",
    "tax_id": "12-3456789",
    "business_type": "Technology",
    "state_code": "CA",
    "classification_code": "8810",
    "product_type": "WorkersCompensation",
    "annual_payroll": "300000.00",
    "annual_revenue": "2000000.00",
    "employee_count": 10,
    "years_in_business": 3,
    "coverage_limit": "1000000",
    "deductible": "500",
}


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client with the application lifespan running."""
    with TestClient(create_app()) as test_client:
        yield test_client


class TestQuoteEndpoints:
    """Test quote creation and retrieval over HTTP."""

    def test_create_quote(self, client):
        """Test that a quote is issued with decimal strings and enum names."""
        response = client.post("/api/v1/quotes", json=QUOTE_PAYLOAD)

        assert response.status_code == 200
        body = response.json()
        assert is_valid_quote_number(body["quote_number"])
        assert body["status"] == "Quoted"
        assert body["product_type"] == "WorkersCompensation"
        assert body["risk_assessment"]["risk_tier"] == "Standard"
        assert body["premium"]["base_premium"] == "750.00"
        assert body["premium"]["annual_premium"] == "1024.60"
        assert body["premium"]["monthly_premium"] == "85.38"
        assert body["is_eligible"] is True

    def test_get_quote_round_trip(self, client):
        """Test that a stored quote is returned exactly as issued."""
        created = client.post("/api/v1/quotes", json=QUOTE_PAYLOAD).json()

        response = client.get(f"/api/v1/quotes/{created['quote_number']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_unknown_quote_404(self, client):
        """Test that an unknown quote number returns 404."""
        response = client.get("/api/v1/quotes/QT-20250101-DEADBEEF")

        assert response.status_code == 404
        assert response.json()["detail"] == "Quote QT-20250101-DEADBEEF not found"

    def test_invalid_request_422(self, client):
        """Test that malformed input is rejected before rating."""
        payload = {**QUOTE_PAYLOAD, "tax_id": "123456789", "deductible": "10"}

        response = client.post("/api/v1/quotes", json=payload)

        assert response.status_code == 422
        fields = {error["loc"][-1] for error in response.json()["detail"]}
        assert {"tax_id", "deductible"} <= fields

    def test_declined_quote_returned(self, client):
        """Test that an ineligible business still receives a priced quote."""
        payload = {**QUOTE_PAYLOAD, "years_in_business": 0, "employee_count": 0}

        body = client.post("/api/v1/quotes", json=payload).json()

        assert body["status"] == "Declined"
        assert body["is_eligible"] is False
        assert len(body["eligibility_messages"]) == 2
        assert body["premium"]["annual_premium"] == "1024.60"

    def test_history(self, client):
        """Test quote history for a business."""
        first = client.post("/api/v1/quotes", json=QUOTE_PAYLOAD).json()
        second = client.post(
            "/api/v1/quotes",
            json={**QUOTE_PAYLOAD, "product_type": "GeneralLiability"},
        ).json()

        response = client.get("/api/v1/quotes/history/12-3456789")

        assert response.status_code == 200
        numbers = {q["quote_number"] for q in response.json()}
        assert numbers == {first["quote_number"], second["quote_number"]}
        assert client.get("/api/v1/quotes/history/98-7654321").json() == []


class TestPremiumEstimateEndpoint:
    """Test the premium preview."""

    def test_estimate(self, client):
        """Test an estimate without persistence."""
        response = client.post(
            "/api/v1/premium/estimate",
            json={
                "product_type": "GeneralLiability",
                "state_code": "TX",
                "annual_revenue": "1000000",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["estimated_annual_premium"] == "7250.55"
        assert body["estimated_monthly_premium"] == "604.21"
        assert body["note"].startswith("This is an estimate")
        assert client.get("/api/v1/health").json()["quotes_stored"] == 0


class TestRateTableEndpoints:
    """Test rate table reference endpoints."""

    def test_resolve_rate(self, client):
        """Test resolving an exact rate."""
        response = client.get(
            "/api/v1/rate-tables/CA/WorkersCompensation",
            params={"classification_code": "8810"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["base_rate"] == "2.50"
        assert body["is_synthetic"] is False

    def test_resolve_rate_falls_back(self, client):
        """Test that an unknown state resolves to the DEFAULT entry."""
        body = client.get("/api/v1/rate-tables/ZZ/CyberLiability").json()

        assert body["state_code"] == "DEFAULT"
        assert body["classification_code"] == "DEFAULT"

    def test_unknown_product_422(self, client):
        """Test that an unknown product name is rejected."""
        response = client.get("/api/v1/rate-tables/CA/MarineCargo")

        assert response.status_code == 422

    @pytest.mark.parametrize("state_code", ["CALIFORNIA", "C", "C1"])
    def test_malformed_state_422(self, client, state_code):
        """Test that state codes other than two letters are rejected."""
        response = client.get(f"/api/v1/rate-tables/{state_code}/WorkersCompensation")

        assert response.status_code == 422

    def test_blank_classification_422(self, client):
        """Test that a whitespace classification code is rejected."""
        response = client.get(
            "/api/v1/rate-tables/CA/WorkersCompensation",
            params={"classification_code": "   "},
        )

        assert response.status_code == 422

    def test_resolve_rate_without_rate_tables(self, monkeypatch):
        """Test that an empty rate table resolves to the zero-rate entry."""
        monkeypatch.setenv("QUOTE_ENGINE_SEED_RATE_TABLES", "false")

        with TestClient(create_app()) as client:
            response = client.get("/api/v1/rate-tables/ca/WorkersCompensation")
            rejected = client.get(
                "/api/v1/rate-tables/CALIFORNIA/WorkersCompensation"
            )

        assert response.status_code == 200
        body = response.json()
        assert body["is_synthetic"] is True
        assert body["state_code"] == "CA"
        assert body["base_rate"] == "0"
        assert rejected.status_code == 422

    def test_classification_codes(self, client):
        """Test listing classification codes for a product."""
        response = client.get(
            "/api/v1/rate-tables/classifications/GeneralLiability"
        )

        assert response.status_code == 200
        codes = [c["code"] for c in response.json()]
        assert "41677" in codes
        assert codes == sorted(codes)

    def test_list_rates_filtered(self, client):
        """Test listing rates for one state and product."""
        response = client.get(
            "/api/v1/rate-tables",
            params={"state_code": "CA", "product_type": "WorkersCompensation"},
        )

        assert response.status_code == 200
        assert {r["classification_code"] for r in response.json()} == {
            "8810",
            "8742",
            "5183",
            "DEFAULT",
        }


class TestHealthEndpoints:
    """Test health and monitoring endpoints."""

    def test_health(self, client):
        """Test the health report."""
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["rate_table_entries"] > 0
        assert body["version"] == "1.0"

    def test_degraded_without_rate_tables(self, monkeypatch):
        """Test that an empty rate table reports degraded."""
        monkeypatch.setenv("QUOTE_ENGINE_SEED_RATE_TABLES", "false")

        with TestClient(create_app()) as client:
            body = client.get("/api/v1/health").json()

        assert body["status"] == "degraded"
        assert body["rate_table_entries"] == 0

    def test_performance_stats(self, client):
        """Test that monitored operations appear after a quote."""
        client.post("/api/v1/quotes", json=QUOTE_PAYLOAD)

        stats = client.get("/api/v1/health/performance").json()

        assert stats["quote_creation"]["count"] == 1

    def test_root(self, client):
        """Test API information at the root."""
        body = client.get("/").json()

        assert body["status"] == "operational"
        assert body["version"] == "1.0"
