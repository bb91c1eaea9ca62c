"""Create the idp_keys table.

Revision ID: 0001
Revises:
"""

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "idp_keys",
        sa.Column("kid", sa.String(255), primary_key=True),
        sa.Column("kty", sa.String(16), nullable=False),
        sa.Column("use", sa.String(16), nullable=True),
        sa.Column("alg", sa.String(16), nullable=True),
        sa.Column("x5t", sa.String(255), nullable=True),
        sa.Column("n", sa.Text(), nullable=True),
        sa.Column("e", sa.String(64), nullable=True),
        sa.Column("x5c", sa.JSON(), nullable=False),
        sa.Column("issuer", sa.String(1024), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("idp_keys")
