from reselec.extensions import db


class Equipement(db.Model):
    """Equipment row referenced by interventions. CRUD lives outside this service."""

    __tablename__ = "Equipement"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    nom = db.Column(db.String(100), nullable=False)
    marque = db.Column(db.String(100), nullable=True)
    modele = db.Column(db.String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Equipement id={self.id} nom={self.nom}>"
