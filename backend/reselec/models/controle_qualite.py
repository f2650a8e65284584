from datetime import date

from reselec.extensions import db


class ControleQualite(db.Model):
    __tablename__ = "ControleQualite"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    dateControle = db.Column(db.Date, nullable=False, default=date.today)

    resultatsEssais = db.Column(db.Text, nullable=True)
    analyseVibratoire = db.Column(db.Text, nullable=True)

    intervention_id = db.Column(
        db.Integer,
        db.ForeignKey("Intervention.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    intervention = db.relationship("Intervention", back_populates="controleQualite")

    __table_args__ = (
        db.Index("ix_controle_qualite_date", "dateControle"),
    )
