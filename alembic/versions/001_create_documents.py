"""001: create documents table (JSONB document store)

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE documents (
            collection      VARCHAR(64)     NOT NULL,
            id              VARCHAR(64)     NOT NULL,
            data            JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (collection, id),
            CONSTRAINT ck_documents_data_object CHECK (jsonb_typeof(data) = 'object')
        )
    """)
    op.execute("CREATE INDEX idx_documents_data ON documents USING GIN (data jsonb_path_ops)")
    # hot filters: active banks, active assignments per exchange / per bank
    op.execute("""
        CREATE INDEX idx_documents_assignments_exchange
        ON documents ((data ->> 'exchangeId'), (data ->> 'isActive'))
        WHERE collection = 'bankAssignments'
    """)
    op.execute("""
        CREATE INDEX idx_documents_assignments_bank
        ON documents ((data ->> 'bankId'), (data ->> 'isActive'))
        WHERE collection = 'bankAssignments'
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS documents")
