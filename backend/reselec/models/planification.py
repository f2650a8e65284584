from datetime import date

from reselec.extensions import db


class Planification(db.Model):
    __tablename__ = "Planification"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    dateCreation = db.Column(db.Date, nullable=False, default=date.today)

    # Relative execution capacity. Unit depends on the deployment (percentage or hours).
    capaciteExecution = db.Column(db.Integer, nullable=True)
    urgencePrise = db.Column(db.Boolean, nullable=False, default=False)
    disponibilitePDR = db.Column(db.Boolean, nullable=False, default=False)

    intervention_id = db.Column(
        db.Integer,
        db.ForeignKey("Intervention.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    intervention = db.relationship("Intervention", back_populates="planification")

    __table_args__ = (
        db.CheckConstraint("capaciteExecution IS NULL OR capaciteExecution >= 0", name="ck_planification_capacite"),
    )

    def __repr__(self) -> str:
        return f"<Planification id={self.id} intervention={self.intervention_id} pdr={self.disponibilitePDR}>"
