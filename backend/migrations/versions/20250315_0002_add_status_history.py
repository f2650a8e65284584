"""add StatusHistory

Revision ID: 20250315_0002
Revises: 20250301_0001
Create Date: 2025-03-15

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = "20250315_0002"
down_revision = "20250301_0001"
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    if "StatusHistory" not in tables:
        op.create_table(
            "StatusHistory",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("intervention_id", sa.Integer(), nullable=False),
            sa.Column("old_status", sa.String(length=50), nullable=False),
            sa.Column("new_status", sa.String(length=50), nullable=False),
            sa.Column("changed_by", sa.Integer(), nullable=True),
            sa.Column("reason", sa.Text(), nullable=True),
            sa.Column("timestamp", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.ForeignKeyConstraint(["intervention_id"], ["Intervention.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["changed_by"], ["Utilisateur.id"], ondelete="SET NULL"),
        )
        op.create_index("ix_status_history_intervention_id", "StatusHistory", ["intervention_id"], unique=False)
        op.create_index("ix_status_history_timestamp", "StatusHistory", ["timestamp"], unique=False)


def downgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    if "StatusHistory" in tables:
        op.drop_index("ix_status_history_timestamp", table_name="StatusHistory")
        op.drop_index("ix_status_history_intervention_id", table_name="StatusHistory")
        op.drop_table("StatusHistory")
