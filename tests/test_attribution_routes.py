"""Tests for the attribution HTTP API."""

import pytest
from sqlalchemy.exc import OperationalError

from postcredit.models.source_models import OpportunityStage

from factories import opportunity, post, recent, signal


@pytest.fixture
def seeded(make_client, add):
    make_client("client-1")
    add(
        post("p-1", posted_at=recent(3)),
        post("p-2", posted_at=recent(4)),
        signal("s-1", created_at=recent(1), post_id="p-1"),
        opportunity("o-1", created_at=recent(1), amount=800, stage=OpportunityStage.CLOSED_WON, inbound_signal_id="s-1"),
    )
    return "client-1"


def test_health(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_recompute_single_range(api, seeded):
    response = api.post("/attribution/recompute", json={"client_id": seeded, "range_days": 7})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert [r["range_days"] for r in body["ranges"]] == [7]
    assert body["ranges"][0]["row_count"] == 2


def test_recompute_all_ranges_when_range_omitted(api, seeded):
    response = api.post("/attribution/recompute", json={"client_id": seeded})
    assert response.status_code == 200
    assert [r["range_days"] for r in response.json()["ranges"]] == [7, 30, 90]


def test_recompute_unknown_client_is_404(api):
    response = api.post("/attribution/recompute", json={"client_id": "ghost", "range_days": 7})
    assert response.status_code == 404


def test_recompute_unsupported_range_is_422(api, seeded):
    response = api.post("/attribution/recompute", json={"client_id": seeded, "range_days": 14})
    assert response.status_code == 422


def test_recompute_storage_failure_is_500(api, seeded, session, monkeypatch):
    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    monkeypatch.setattr(session, "commit", failing_commit)
    response = api.post("/attribution/recompute", json={"client_id": seeded, "range_days": 30})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to recompute attribution"


def test_results_after_recompute(api, seeded):
    api.post("/attribution/recompute", json={"client_id": seeded, "range_days": 30})

    response = api.get("/attribution/results", params={"client_id": seeded, "range_days": 30})
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    top = body["results"][0]
    assert top["post_id"] == "p-1"
    assert top["pipeline_amount"] == 800
    assert top["revenue_won_amount"] == 800
    assert top["confidence"] == "HIGH"
    assert top["supporting_links"] == {"inbound_signal_ids": ["s-1"], "opportunity_ids": ["o-1"]}
    assert body["results"][1]["confidence"] == "UNATTRIBUTED"


def test_results_empty_before_any_recompute(api, seeded):
    response = api.get("/attribution/results", params={"client_id": seeded, "range_days": 7})
    assert response.json()["count"] == 0
    assert response.json()["computed_at"] is None


def test_preview_does_not_persist(api, seeded):
    response = api.get("/attribution/preview", params={"client_id": seeded, "range_days": 7})
    assert response.status_code == 200
    rows = {r["post_id"]: r for r in response.json()["rows"]}
    assert rows["p-1"]["influenced_signal_count"] == 1
    assert rows["p-1"]["confidence"] == "HIGH"

    stored = api.get("/attribution/results", params={"client_id": seeded, "range_days": 7})
    assert stored.json()["count"] == 0


def test_preview_unknown_client_is_404(api):
    response = api.get("/attribution/preview", params={"client_id": "ghost", "range_days": 7})
    assert response.status_code == 404
