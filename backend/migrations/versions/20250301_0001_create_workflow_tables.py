"""create intervention workflow tables

Revision ID: 20250301_0001
Revises: 
Create Date: 2025-03-01

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = "20250301_0001"
down_revision = None
branch_labels = None
depends_on = None

STATUTS = ("PLANIFIEE", "EN_ATTENTE_PDR", "EN_COURS", "EN_PAUSE", "TERMINEE", "ANNULEE", "ECHEC")


def _diagnostic_list_table(name: str, value_column: str):
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("diagnostic_id", sa.Integer(), nullable=False),
        sa.Column("ordre", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(value_column, sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(["diagnostic_id"], ["Diagnostic.id"], ondelete="CASCADE"),
    )
    op.create_index(f"ix_{name}_diagnostic_id", name, ["diagnostic_id"], unique=False)


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    # Utilisateur and Equipement usually come from the main ERP schema; only created when missing.
    if "Utilisateur" not in tables:
        op.create_table(
            "Utilisateur",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("nom", sa.String(length=100), nullable=False),
            sa.Column("username", sa.String(length=50), nullable=False),
            sa.UniqueConstraint("username", name="uq_utilisateur_username"),
        )

    if "Equipement" not in tables:
        op.create_table(
            "Equipement",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("nom", sa.String(length=100), nullable=False),
            sa.Column("marque", sa.String(length=100), nullable=True),
            sa.Column("modele", sa.String(length=100), nullable=True),
        )

    if "Intervention" not in tables:
        op.create_table(
            "Intervention",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("date", sa.Date(), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column(
                "statut",
                sa.Enum(*STATUTS, name="statut_intervention_enum", native_enum=False, length=50),
                nullable=False,
                server_default="PLANIFIEE",
            ),
            sa.Column("urgence", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("equipement_id", sa.Integer(), nullable=False),
            sa.Column("creerPar_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["equipement_id"], ["Equipement.id"], ondelete="RESTRICT"),
            sa.ForeignKeyConstraint(["creerPar_id"], ["Utilisateur.id"], ondelete="RESTRICT"),
        )
        op.create_index("ix_intervention_statut", "Intervention", ["statut"], unique=False)
        op.create_index("ix_intervention_date", "Intervention", ["date"], unique=False)
        op.create_index("ix_intervention_equipement_id", "Intervention", ["equipement_id"], unique=False)

    if "Diagnostic" not in tables:
        op.create_table(
            "Diagnostic",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("dateCreation", sa.Date(), nullable=False),
            sa.Column("intervention_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["intervention_id"], ["Intervention.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("intervention_id", name="uq_diagnostic_intervention_id"),
        )

    if "Diagnostic_travailRequis" not in tables:
        _diagnostic_list_table("Diagnostic_travailRequis", "travail")
    if "Diagnostic_besoinPDR" not in tables:
        _diagnostic_list_table("Diagnostic_besoinPDR", "besoin")
    if "Diagnostic_chargesRealisees" not in tables:
        _diagnostic_list_table("Diagnostic_chargesRealisees", "charge")

    if "Planification" not in tables:
        op.create_table(
            "Planification",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("dateCreation", sa.Date(), nullable=False),
            sa.Column("capaciteExecution", sa.Integer(), nullable=True),
            sa.Column("urgencePrise", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("disponibilitePDR", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("intervention_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["intervention_id"], ["Intervention.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("intervention_id", name="uq_planification_intervention_id"),
            sa.CheckConstraint(
                "capaciteExecution IS NULL OR capaciteExecution >= 0",
                name="ck_planification_capacite",
            ),
        )

    if "ControleQualite" not in tables:
        op.create_table(
            "ControleQualite",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("dateControle", sa.Date(), nullable=False),
            sa.Column("resultatsEssais", sa.Text(), nullable=True),
            sa.Column("analyseVibratoire", sa.Text(), nullable=True),
            sa.Column("intervention_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["intervention_id"], ["Intervention.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("intervention_id", name="uq_controle_qualite_intervention_id"),
        )
        op.create_index("ix_controle_qualite_date", "ControleQualite", ["dateControle"], unique=False)

    if "Rapport" not in tables:
        op.create_table(
            "Rapport",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("dateCreation", sa.Date(), nullable=False),
            sa.Column("contenu", sa.Text(), nullable=True),
            sa.Column("validation", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("intervention_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["intervention_id"], ["Intervention.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_Rapport_intervention_id", "Rapport", ["intervention_id"], unique=False)


def downgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    for name in (
        "Rapport",
        "ControleQualite",
        "Planification",
        "Diagnostic_chargesRealisees",
        "Diagnostic_besoinPDR",
        "Diagnostic_travailRequis",
        "Diagnostic",
        "Intervention",
    ):
        if name in tables:
            op.drop_table(name)

    # Utilisateur and Equipement are left in place: they may predate this schema.
