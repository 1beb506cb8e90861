"""002: seed admin user for local development

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO documents (collection, id, data) VALUES
        ('users', 'admin', '{
            "username": "admin",
            "role": "admin",
            "balance": 0,
            "status": "active",
            "commissionRates": {
                "incoming": {"type": "fixed", "value": 0},
                "outgoing": {"type": "percentage", "value": 0}
            }
        }'::jsonb)
        ON CONFLICT (collection, id) DO NOTHING
    """)


def downgrade() -> None:
    op.execute("DELETE FROM documents WHERE collection = 'users' AND id = 'admin'")
