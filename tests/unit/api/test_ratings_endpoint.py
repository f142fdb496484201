"""Tests for the combined rating endpoint."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from eatsift.api.app import create_app
from eatsift.config.settings import Settings


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


class TestCombinedRating:
    def test_weighted_mean(self, client: TestClient) -> None:
        response = client.post(
            "/v1/ratings/combined",
            json={
                "sources": {
                    "google": {"rating": 4.5, "count": 100},
                    "tripadvisor": {"rating": 3.0, "count": 50},
                }
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["combined_rating"] == pytest.approx(4.0)
        assert data["total_count"] == 150
        assert data["display"] == "4.0"

    def test_first_party_reviews(self, client: TestClient) -> None:
        response = client.post(
            "/v1/ratings/combined",
            json={"sources": {"google": {"rating": 4.0, "count": 2}}, "review_ratings": [5, 5]},
        )
        data = response.json()
        assert data["source_counts"] == {"google": 2, "easyeats": 2}
        assert data["combined_rating"] == pytest.approx(4.5)

    def test_no_ratings(self, client: TestClient) -> None:
        response = client.post("/v1/ratings/combined", json={"sources": {"google": {"rating": None, "count": 0}}})
        data = response.json()
        assert data["combined_rating"] is None
        assert data["display"] == "No ratings yet"

    def test_rejects_out_of_range_rating(self, client: TestClient) -> None:
        response = client.post("/v1/ratings/combined", json={"sources": {"google": {"rating": 7, "count": 1}}})
        assert response.status_code == 422

    def test_rejects_out_of_range_review_scores(self, client: TestClient) -> None:
        response = client.post("/v1/ratings/combined", json={"review_ratings": [7, 9]})
        assert response.status_code == 422
