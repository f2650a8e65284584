from datetime import date

from reselec.extensions import db


class Diagnostic(db.Model):
    __tablename__ = "Diagnostic"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    dateCreation = db.Column(db.Date, nullable=False, default=date.today)

    # At most one diagnostic per intervention
    intervention_id = db.Column(
        db.Integer,
        db.ForeignKey("Intervention.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    intervention = db.relationship("Intervention", back_populates="diagnostic")

    travaux = db.relationship(
        "DiagnosticTravailRequis",
        order_by="DiagnosticTravailRequis.ordre",
        cascade="all, delete-orphan",
    )
    besoins = db.relationship(
        "DiagnosticBesoinPDR",
        order_by="DiagnosticBesoinPDR.ordre",
        cascade="all, delete-orphan",
    )
    charges = db.relationship(
        "DiagnosticChargeRealisee",
        order_by="DiagnosticChargeRealisee.ordre",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Diagnostic id={self.id} intervention={self.intervention_id}>"


# Value lists of a diagnostic: rows have no identity beyond position and content.

class DiagnosticTravailRequis(db.Model):
    __tablename__ = "Diagnostic_travailRequis"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    diagnostic_id = db.Column(
        db.Integer,
        db.ForeignKey("Diagnostic.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ordre = db.Column(db.Integer, nullable=False, default=0)
    travail = db.Column(db.String(255), nullable=False)


class DiagnosticBesoinPDR(db.Model):
    __tablename__ = "Diagnostic_besoinPDR"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    diagnostic_id = db.Column(
        db.Integer,
        db.ForeignKey("Diagnostic.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ordre = db.Column(db.Integer, nullable=False, default=0)
    besoin = db.Column(db.String(255), nullable=False)


class DiagnosticChargeRealisee(db.Model):
    __tablename__ = "Diagnostic_chargesRealisees"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    diagnostic_id = db.Column(
        db.Integer,
        db.ForeignKey("Diagnostic.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ordre = db.Column(db.Integer, nullable=False, default=0)
    charge = db.Column(db.String(255), nullable=False)
