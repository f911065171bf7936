"""create counters

Revision ID: 3b1e07c5d2a4
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1e07c5d2a4"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Hot keys land in different partitions; a single key always lands in one.
PARTITION_COUNT = 128


def upgrade() -> None:
    # Alembic's create_table cannot declare a partitioned parent with
    # PARTITION OF children, so this is plain DDL.
    op.execute(
        """
        CREATE TABLE counters (
            key TEXT NOT NULL,
            minute_window TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            count INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (key, minute_window)
        ) PARTITION BY HASH (key)
        """
    )
    for i in range(PARTITION_COUNT):
        op.execute(
            f"CREATE TABLE counters_p{i} PARTITION OF counters "
            f"FOR VALUES WITH (MODULUS {PARTITION_COUNT}, REMAINDER {i})"
        )


def downgrade() -> None:
    # Dropping the parent drops every partition.
    op.execute("DROP TABLE IF EXISTS counters CASCADE")
