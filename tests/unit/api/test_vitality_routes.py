"""Unit tests for the vote, issue, badge, metrics and health routes.

The app runs over in-memory stubs injected through the bootstrap
setters, in sync recompute mode with a 100-person ward.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from issue_vitality.api.main import create_app
from issue_vitality.bootstrap.vitality import (
    set_badge_store,
    set_issue_store,
    set_status_history,
    set_time_authority,
    set_vitality_config,
    set_vote_ledger,
)
from issue_vitality.config.vitality_config import TEST_VITALITY_CONFIG
from issue_vitality.domain.models.issue_aggregate import IssueAggregate, IssueMeta
from issue_vitality.infrastructure.stubs import (
    BadgeStoreStub,
    IssueStoreStub,
    StatusHistoryStub,
    VoteLedgerStub,
)
from tests.helpers import FakeTimeAuthority

CREATED = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def issue_store(fake_time_authority: FakeTimeAuthority) -> IssueStoreStub:
    return IssueStoreStub(fake_time_authority)


@pytest.fixture
def vote_ledger(fake_time_authority: FakeTimeAuthority) -> VoteLedgerStub:
    return VoteLedgerStub(fake_time_authority)


@pytest.fixture
def badge_store(fake_time_authority: FakeTimeAuthority) -> BadgeStoreStub:
    return BadgeStoreStub(fake_time_authority)


@pytest.fixture
def creator_id() -> UUID:
    return uuid4()


@pytest.fixture
def client(
    monkeypatch: pytest.MonkeyPatch,
    fake_time_authority: FakeTimeAuthority,
    issue_store: IssueStoreStub,
    vote_ledger: VoteLedgerStub,
    badge_store: BadgeStoreStub,
) -> Iterator[TestClient]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    set_vitality_config(TEST_VITALITY_CONFIG)
    set_time_authority(fake_time_authority)
    set_issue_store(issue_store)
    set_vote_ledger(vote_ledger)
    set_status_history(StatusHistoryStub(fake_time_authority))
    set_badge_store(badge_store)

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def issue_id(issue_store: IssueStoreStub, creator_id: UUID) -> UUID:
    meta = IssueMeta(
        issue_id=uuid4(), created_at=CREATED, ward_id="ward-7", created_by=creator_id
    )
    issue_store.add_issue(meta)
    return meta.issue_id


def _vote(client: TestClient, issue_id: UUID, rating: int, user_id: UUID | None = None):
    return client.post(
        f"/v1/issues/{issue_id}/votes",
        json={"user_id": str(user_id or uuid4()), "rating": rating},
    )


class TestSubmitVote:
    def test_success(self, client: TestClient, issue_id: UUID) -> None:
        response = _vote(client, issue_id, 4)

        assert response.status_code == 200
        data = response.json()
        assert data["issue_id"] == str(issue_id)
        assert data["rating"] == 4
        assert data["replaced"] is False
        assert data["deferred"] is False
        assert data["escalated"] is False
        assert data["aggregate"]["vote_count"] == 1
        assert data["aggregate"]["vitality_score"] == pytest.approx(89.0)
        assert data["aggregate"]["escalation_tier"] == "none"
        assert data["aggregate"]["created_at"].endswith("Z")

    def test_correlation_id_echoed(self, client: TestClient, issue_id: UUID) -> None:
        response = client.post(
            f"/v1/issues/{issue_id}/votes",
            json={"user_id": str(uuid4()), "rating": 3},
            headers={"X-Correlation-ID": "req-123"},
        )

        assert response.headers["X-Correlation-ID"] == "req-123"

    def test_correlation_id_generated(self, client: TestClient, issue_id: UUID) -> None:
        response = _vote(client, issue_id, 3)

        assert UUID(response.headers["X-Correlation-ID"])

    def test_unsafe_correlation_id_replaced(self, client: TestClient, issue_id: UUID) -> None:
        response = client.post(
            f"/v1/issues/{issue_id}/votes",
            json={"user_id": str(uuid4()), "rating": 3},
            headers={"X-Correlation-ID": "not a safe id"},
        )

        assert response.headers["X-Correlation-ID"] != "not a safe id"
        assert UUID(response.headers["X-Correlation-ID"])

    def test_revote(self, client: TestClient, issue_id: UUID) -> None:
        user_id = uuid4()
        _vote(client, issue_id, 1, user_id)

        data = _vote(client, issue_id, 5, user_id).json()

        assert data["replaced"] is True
        assert data["aggregate"]["vote_count"] == 1

    @pytest.mark.parametrize("rating", [0, 6, "five", 3.5, True])
    def test_invalid_rating(
        self, client: TestClient, issue_id: UUID, vote_ledger: VoteLedgerStub, rating: object
    ) -> None:
        response = client.post(
            f"/v1/issues/{issue_id}/votes",
            json={"user_id": str(uuid4()), "rating": rating},
        )

        assert response.status_code == 422
        assert vote_ledger.vote_count(issue_id) == 0

    def test_unknown_issue(self, client: TestClient) -> None:
        missing = uuid4()

        response = _vote(client, missing, 3)

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["type"] == "urn:issue-vitality:issue:not-found"
        assert detail["issue_id"] == str(missing)
        assert detail["instance"].endswith(f"/v1/issues/{missing}/votes")

    def test_store_unavailable(
        self, client: TestClient, issue_id: UUID, vote_ledger: VoteLedgerStub
    ) -> None:
        vote_ledger.faults.fail("upsert_vote")

        response = _vote(client, issue_id, 3)

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "1"
        assert response.json()["detail"]["operation"] == "upsert_vote"

    def test_tenth_vote_escalates(self, client: TestClient, issue_id: UUID) -> None:
        responses = [_vote(client, issue_id, 4) for _ in range(10)]

        assert [r.json()["escalated"] for r in responses] == [False] * 9 + [True]
        assert responses[-1].json()["aggregate"]["escalation_tier"] == "local"

        history = client.get(f"/v1/issues/{issue_id}/status-history").json()
        assert [u["status"] for u in history["updates"]] == ["escalated_local"]
        assert history["updates"][0]["created_at"].endswith("Z")


class TestWithdrawVote:
    def test_withdraw(self, client: TestClient, issue_id: UUID) -> None:
        user_id = uuid4()
        _vote(client, issue_id, 4, user_id)

        first = client.delete(f"/v1/issues/{issue_id}/votes/{user_id}")
        second = client.delete(f"/v1/issues/{issue_id}/votes/{user_id}")

        assert first.status_code == 200
        assert first.json()["removed"] is True
        assert first.json()["aggregate"]["vote_count"] == 0
        assert second.json()["removed"] is False
        assert second.json()["aggregate"] is None

    def test_unknown_issue(self, client: TestClient) -> None:
        response = client.delete(f"/v1/issues/{uuid4()}/votes/{uuid4()}")

        assert response.status_code == 404


class TestIssueReads:
    def test_get_vitality(self, client: TestClient, issue_id: UUID) -> None:
        _vote(client, issue_id, 5)

        response = client.get(f"/v1/issues/{issue_id}/vitality")

        assert response.status_code == 200
        assert response.json()["ward_id"] == "ward-7"
        assert response.json()["support_percentage"] == pytest.approx(1.0)

    def test_get_vitality_unknown(self, client: TestClient) -> None:
        response = client.get(f"/v1/issues/{uuid4()}/vitality")

        assert response.status_code == 404
        assert response.json()["detail"]["status"] == 404

    def test_invalid_issue_id(self, client: TestClient) -> None:
        assert client.get("/v1/issues/not-a-uuid/vitality").status_code == 422

    def test_hot_and_priority(self, client: TestClient, issue_store: IssueStoreStub) -> None:
        for support, score in ((5.0, 150.0), (30.0, 60.0), (22.0, 90.0)):
            meta = IssueMeta(issue_id=uuid4(), created_at=CREATED, ward_id="ward-7")
            issue_store.add_issue(meta)
            issue_store.force_aggregate(
                IssueAggregate(
                    issue_id=meta.issue_id,
                    created_at=CREATED,
                    ward_id="ward-7",
                    vitality_score=score,
                    support_percentage=support,
                )
            )

        hot = client.get("/v1/issues/hot").json()
        priority = client.get("/v1/issues/priority", params={"limit": 2}).json()

        assert [i["support_percentage"] for i in hot["issues"]] == [30.0, 22.0]
        assert hot["count"] == 2
        assert [i["vitality_score"] for i in priority["issues"]] == [150.0, 90.0]

    def test_ward_filter(self, client: TestClient, issue_store: IssueStoreStub) -> None:
        meta = IssueMeta(issue_id=uuid4(), created_at=CREATED, ward_id="ward-9")
        issue_store.add_issue(meta)

        data = client.get("/v1/issues/priority", params={"ward_id": "ward-1"}).json()

        assert data == {"issues": [], "count": 0}

    def test_limit_bounds(self, client: TestClient) -> None:
        assert client.get("/v1/issues/hot", params={"limit": 0}).status_code == 422


class TestOperationalRoutes:
    def test_metrics(self, client: TestClient, issue_id: UUID) -> None:
        _vote(client, issue_id, 3)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'vitality_recomputes_total{' in response.text

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestUserBadges:
    def test_creator_badge_listed_after_twenty_percent(
        self, client: TestClient, issue_id: UUID, creator_id: UUID
    ) -> None:
        for _ in range(12):
            _vote(client, issue_id, 4)
        assert client.get(f"/v1/users/{creator_id}/badges").json()["count"] == 0

        for _ in range(8):
            _vote(client, issue_id, 4)
        response = client.get(f"/v1/users/{creator_id}/badges")

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == str(creator_id)
        assert data["count"] == 1
        badge = data["badges"][0]
        assert badge["badge_type"] == "voice_hero"
        assert badge["name"] == "Voice Hero"
        assert badge["granted_at"].endswith("Z")

    def test_unknown_user_has_no_badges(self, client: TestClient) -> None:
        response = client.get(f"/v1/users/{uuid4()}/badges")

        assert response.status_code == 200
        assert response.json()["badges"] == []

    def test_invalid_user_id(self, client: TestClient) -> None:
        assert client.get("/v1/users/not-a-uuid/badges").status_code == 422

    def test_store_unavailable(self, client: TestClient, badge_store: BadgeStoreStub) -> None:
        badge_store.faults.fail("list_badges")

        response = client.get(f"/v1/users/{uuid4()}/badges")

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "1"
