from reselec.extensions import db


class Utilisateur(db.Model):
    __tablename__ = "Utilisateur"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    nom = db.Column(db.String(100), nullable=False)
    username = db.Column(db.String(50), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Utilisateur id={self.id} username={self.username}>"
