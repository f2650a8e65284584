import itertools
from datetime import date

import pytest

from sqlalchemy.pool import StaticPool
from flask_jwt_extended import create_access_token

from reselec import create_app
from reselec.config import TestConfig as BaseTestConfig
from reselec.extensions import db

# Import models so SQLAlchemy registers mappers/tables
from reselec.models.utilisateur import Utilisateur
from reselec.models.equipement import Equipement
from reselec.models.intervention import Intervention, InterventionStatus
from reselec.models.diagnostic import Diagnostic
from reselec.models.planification import Planification  # noqa: F401
from reselec.models.controle_qualite import ControleQualite  # noqa: F401
from reselec.models.rapport import Rapport  # noqa: F401
from reselec.models.status_history import StatusHistory  # noqa: F401


_seq = itertools.count(1)


class PytestConfig(BaseTestConfig):
	SQLALCHEMY_DATABASE_URI = "sqlite://"
	SQLALCHEMY_ENGINE_OPTIONS = {
		"connect_args": {"check_same_thread": False},
		"poolclass": StaticPool,
	}
	JWT_SECRET_KEY = "test-secret"


@pytest.fixture(scope="session")
def app():
	app = create_app(PytestConfig)
	with app.app_context():
		db.create_all()
		yield app
		db.session.remove()
		db.drop_all()


@pytest.fixture()
def client(app):
	return app.test_client()


@pytest.fixture()
def db_session(app):
	with app.app_context():
		yield db.session
		db.session.rollback()


@pytest.fixture()
def make_user(db_session):
	def _make_user(nom: str = "Technicien"):
		u = Utilisateur(nom=nom, username=f"tech{next(_seq)}")
		db_session.add(u)
		db_session.commit()
		return u

	return _make_user


@pytest.fixture()
def make_equipement(db_session):
	def _make_equipement(nom: str = "Moteur asynchrone 15 kW"):
		e = Equipement(nom=nom, marque="Leroy-Somer", modele=f"LS-{next(_seq)}")
		db_session.add(e)
		db_session.commit()
		return e

	return _make_equipement


@pytest.fixture()
def make_intervention(db_session, make_user, make_equipement):
	def _make_intervention(
		statut: InterventionStatus = InterventionStatus.PLANNED,
		urgence: bool = False,
		le: date | None = None,
		with_diagnostic: bool = False,
		user=None,
	):
		user = user or make_user()
		equipement = make_equipement()
		i = Intervention(
			date=le or date.today(),
			description="Bruit anormal au démarrage",
			statut=statut,
			urgence=urgence,
			equipement_id=equipement.id,
			creerPar_id=user.id,
		)
		db_session.add(i)
		if with_diagnostic:
			db_session.add(Diagnostic(intervention=i))
		db_session.commit()
		return i

	return _make_intervention


@pytest.fixture()
def make_token(app):
	def _make_token(user_id: int) -> str:
		with app.app_context():
			return create_access_token(identity=str(user_id))

	return _make_token


@pytest.fixture()
def auth_header(make_token):
	def _auth_header(user_id: int) -> dict:
		token = make_token(user_id)
		return {"Authorization": f"Bearer {token}"}

	return _auth_header
