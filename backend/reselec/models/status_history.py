from datetime import datetime

from reselec.extensions import db


class StatusHistory(db.Model):
    """One row per manual status change of an intervention."""

    __tablename__ = "StatusHistory"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    intervention_id = db.Column(
        db.Integer,
        db.ForeignKey("Intervention.id", ondelete="CASCADE"),
        nullable=False,
    )
    old_status = db.Column(db.String(50), nullable=False)
    new_status = db.Column(db.String(50), nullable=False)

    # Null when the change did not come from an authenticated user
    changed_by = db.Column(
        db.Integer,
        db.ForeignKey("Utilisateur.id", ondelete="SET NULL"),
        nullable=True,
    )
    reason = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_status_history_intervention_id", "intervention_id"),
        db.Index("ix_status_history_timestamp", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<StatusHistory intervention={self.intervention_id} {self.old_status}->{self.new_status}>"
