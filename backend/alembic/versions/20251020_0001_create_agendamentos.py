"""Create agendamentos table.

Revision ID: 20251020_0001
Revises:
Create Date: 2025-10-20 00:00:01
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20251020_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "agendamentos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("numero_nota", sa.String(length=255), nullable=False),
        sa.Column("numero_instalacao", sa.String(length=255), nullable=False),
        sa.Column("responsavel_pelo_agendamento", sa.String(length=255), nullable=False),
        sa.Column("localidade", sa.String(length=50), nullable=False),
        sa.Column("data_original", sa.Date(), nullable=False),
        sa.Column("periodo_original", sa.String(length=10), nullable=False),
        sa.Column("data_atual", sa.Date(), nullable=False),
        sa.Column("periodo_atual", sa.String(length=10), nullable=False),
        sa.Column(
            "status",
            sa.String(length=20),
            server_default="agendado",
            nullable=False,
        ),
        sa.Column(
            "quantidade_reagendamentos",
            sa.Integer(),
            server_default="0",
            nullable=False,
        ),
        sa.Column("reagendado_em", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "criado_em",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
    )
    op.create_index(
        "ix_agendamentos_numero_nota", "agendamentos", ["numero_nota"], unique=True
    )
    op.create_index(
        "ix_agendamentos_slot",
        "agendamentos",
        ["localidade", "data_atual", "periodo_atual"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_agendamentos_slot", table_name="agendamentos")
    op.drop_index("ix_agendamentos_numero_nota", table_name="agendamentos")
    op.drop_table("agendamentos")
