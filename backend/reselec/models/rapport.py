from datetime import date

from reselec.extensions import db


class Rapport(db.Model):
    __tablename__ = "Rapport"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    dateCreation = db.Column(db.Date, nullable=False, default=date.today)
    contenu = db.Column(db.Text, nullable=True)
    validation = db.Column(db.Boolean, nullable=False, default=False)

    intervention_id = db.Column(
        db.Integer,
        db.ForeignKey("Intervention.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    intervention = db.relationship("Intervention", back_populates="rapports")
