from flask_jwt_extended import get_jwt_identity

from reselec.extensions import db
from reselec.models.utilisateur import Utilisateur
from reselec.utils.errors import ApiError, NotFoundError


def current_utilisateur_id() -> int:
	identity = get_jwt_identity()
	try:
		return int(identity)
	except (TypeError, ValueError):
		raise ApiError("Invalid token", 401)


def require_utilisateur(id_utilisateur: int) -> Utilisateur:
	utilisateur: Utilisateur | None = db.session.get(Utilisateur, id_utilisateur)
	if not utilisateur:
		raise NotFoundError("User not found")
	return utilisateur
