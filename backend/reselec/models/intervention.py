import enum

from reselec.extensions import db


class InterventionStatus(str, enum.Enum):
    """Intervention status. Values are the strings stored in BD and sent on the wire."""

    PLANNED = "PLANIFIEE"
    AWAITING_PARTS = "EN_ATTENTE_PDR"
    IN_PROGRESS = "EN_COURS"
    PAUSED = "EN_PAUSE"
    COMPLETED = "TERMINEE"
    CANCELLED = "ANNULEE"
    FAILED = "ECHEC"


class Intervention(db.Model):
    __tablename__ = "Intervention"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    # Service date (date only)
    date = db.Column(db.Date, nullable=False)
    description = db.Column(db.Text, nullable=True)

    statut = db.Column(
        db.Enum(
            InterventionStatus,
            name="statut_intervention_enum",
            native_enum=False,
            length=50,
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
        default=InterventionStatus.PLANNED,
    )

    urgence = db.Column(db.Boolean, nullable=False, default=False)

    equipement_id = db.Column(
        db.Integer,
        db.ForeignKey("Equipement.id", ondelete="RESTRICT"),
        nullable=False,
    )
    creerPar_id = db.Column(
        db.Integer,
        db.ForeignKey("Utilisateur.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Relaciones
    equipement = db.relationship("Equipement", lazy="joined")
    creerPar = db.relationship("Utilisateur", lazy="joined")

    diagnostic = db.relationship("Diagnostic", uselist=False, back_populates="intervention")
    planification = db.relationship("Planification", uselist=False, back_populates="intervention")
    controleQualite = db.relationship("ControleQualite", uselist=False, back_populates="intervention")
    rapports = db.relationship(
        "Rapport",
        back_populates="intervention",
        order_by="Rapport.id",
    )

    __table_args__ = (
        db.Index("ix_intervention_statut", "statut"),
        db.Index("ix_intervention_date", "date"),
        db.Index("ix_intervention_equipement_id", "equipement_id"),
    )

    def __repr__(self) -> str:
        return f"<Intervention id={self.id} statut={self.statut}>"
