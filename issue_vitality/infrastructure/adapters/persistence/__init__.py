"""PostgreSQL adapters (SQLAlchemy async + asyncpg) for the engine's ports."""

from issue_vitality.infrastructure.adapters.persistence.postgres_badge_store import (
    PostgresBadgeStore,
)
from issue_vitality.infrastructure.adapters.persistence.postgres_issue_store import (
    PostgresIssueStore,
)
from issue_vitality.infrastructure.adapters.persistence.postgres_status_history import (
    PostgresStatusHistory,
)
from issue_vitality.infrastructure.adapters.persistence.postgres_vote_ledger import (
    PostgresVoteLedger,
)
from issue_vitality.infrastructure.adapters.persistence.schema import create_schema

__all__: list[str] = [
    "PostgresBadgeStore",
    "PostgresIssueStore",
    "PostgresStatusHistory",
    "PostgresVoteLedger",
    "create_schema",
]
