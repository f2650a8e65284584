from datetime import date, timedelta

import pytest

from reselec.models.intervention import Intervention
from reselec.models.rapport import Rapport
from reselec.models.status_history import StatusHistory
from reselec.services import workflow_service
from reselec.utils.errors import ApiError


def _create(client, headers, equipement_id, **extra):
	body = {"equipement_id": equipement_id, "date": date.today().isoformat()}
	body.update(extra)
	resp = client.post("/api/interventions", json=body, headers=headers)
	assert resp.status_code == 201, resp.get_json()
	return resp.get_json()["data"]


def test_health(client):
	resp = client.get("/api/health")
	assert resp.status_code == 200
	assert resp.get_json()["status"] == "ok"


def test_requires_token(client):
	resp = client.get("/api/interventions/1/workflow")
	assert resp.status_code == 401


def test_full_workflow_reaches_completion(client, make_user, make_equipement, auth_header, db_session):
	user = make_user("Karim")
	equipement = make_equipement()
	headers = auth_header(user.id)

	intervention = _create(client, headers, equipement.id, urgence=True, description="Moteur ventilateur")
	assert intervention["statut"] == "PLANIFIEE"
	assert intervention["creerPar"] == {"id": user.id, "nom": "Karim"}
	iid = intervention["id"]

	resp = client.get(f"/api/interventions/{iid}/workflow", headers=headers)
	assert resp.status_code == 200
	view = resp.get_json()["data"]
	assert view["phases"]["diagnostic"]["exists"] is True
	assert view["phases"]["planification"]["exists"] is False
	assert view["progress"] == {"completed": 2, "total": 2, "percentage": 100}
	assert view["nextActions"][0].startswith("URGENT")
	assert view["intervention"]["priorite"] == "HAUTE"
	assert view["currentPhase"] == "PLANIFICATION"
	assert view["canAdvance"] is True

	resp = client.post(
		f"/api/interventions/{iid}/diagnostic",
		json={"travailRequis": ["Rebobinage"], "besoinPDR": ["Roulement 6205", "  "], "chargesRealisees": []},
		headers=headers,
	)
	assert resp.status_code == 200
	assert resp.get_json()["data"]["besoinPDR"] == ["Roulement 6205"]

	view = client.get(f"/api/interventions/{iid}/workflow", headers=headers).get_json()["data"]
	assert view["statut"] == "EN_ATTENTE_PDR"
	assert view["canAdvance"] is False

	resp = client.put(
		f"/api/interventions/{iid}/planification",
		json={"capaciteExecution": 80, "urgencePrise": True, "disponibilitePDR": True},
		headers=headers,
	)
	assert resp.status_code == 200

	view = client.get(f"/api/interventions/{iid}/workflow", headers=headers).get_json()["data"]
	assert view["statut"] == "EN_COURS"
	assert view["progress"] == {"completed": 3, "total": 3, "percentage": 100}
	assert view["currentPhase"] == "EXECUTION"

	resp = client.post(
		f"/api/interventions/{iid}/controle-qualite",
		json={"resultatsEssais": "Essais conformes", "analyseVibratoire": "1.8 mm/s"},
		headers=headers,
	)
	assert resp.status_code == 201

	view = client.get(f"/api/interventions/{iid}/workflow", headers=headers).get_json()["data"]
	assert view["canAdvance"] is True
	assert view["phases"]["controleQualite"]["validationTechnique"] is True
	assert [e["phase"] for e in view["timeline"]] == ["CREATION", "DIAGNOSTIC", "PLANIFICATION", "CONTROLE_QUALITE"]

	resp = client.put(f"/api/interventions/{iid}/status", json={"statut": "TERMINEE"}, headers=headers)
	assert resp.status_code == 200
	assert resp.get_json()["data"]["statut"] == "TERMINEE"

	db_session.add(Rapport(intervention_id=iid, contenu="Rapport final", validation=True))
	db_session.commit()

	view = client.get(f"/api/interventions/{iid}/workflow", headers=headers).get_json()["data"]
	assert view["progress"] == {"completed": 4, "total": 4, "percentage": 100}
	assert view["availableTransitions"] == []
	assert view["canAdvance"] is False
	assert view["nextActions"] == ["Generate final report"]
	assert view["phases"]["rapport"] == {"completed": True, "count": 1, "validated": True}

	resp = client.put(f"/api/interventions/{iid}/status", json={"statut": "EN_COURS"}, headers=headers)
	assert resp.status_code == 400
	body = resp.get_json()
	assert body["success"] is False
	assert body["payload"] == {"current": "TERMINEE", "requested": "EN_COURS", "allowed": []}


def test_rejected_transition_lists_allowed_targets(client, make_user, make_equipement, auth_header):
	user = make_user()
	headers = auth_header(user.id)
	iid = _create(client, headers, make_equipement().id)["id"]

	resp = client.put(f"/api/interventions/{iid}/status", json={"statut": "TERMINEE"}, headers=headers)
	assert resp.status_code == 400
	assert resp.get_json()["payload"]["allowed"] == ["EN_ATTENTE_PDR", "EN_COURS", "ANNULEE"]

	resp = client.get(f"/api/interventions/{iid}", headers=headers)
	assert resp.get_json()["data"]["statut"] == "PLANIFIEE"


def test_overdue_intervention(client, make_user, make_equipement, auth_header):
	user = make_user()
	headers = auth_header(user.id)
	old = (date.today() - timedelta(days=30)).isoformat()
	iid = _create(client, headers, make_equipement().id, date=old)["id"]

	view = client.get(f"/api/interventions/{iid}/workflow", headers=headers).get_json()["data"]
	assert view["overdue"] is True
	assert view["timeline"][0]["date"] == old


def test_validation_errors(client, make_user, make_equipement, auth_header):
	user = make_user()
	headers = auth_header(user.id)
	iid = _create(client, headers, make_equipement().id)["id"]

	resp = client.put(
		f"/api/interventions/{iid}/planification",
		json={"capaciteExecution": -5, "disponibilitePDR": True},
		headers=headers,
	)
	assert resp.status_code == 400
	assert "capaciteExecution" in resp.get_json()["errors"]

	resp = client.put(f"/api/interventions/{iid}/status", json={"statut": "FINI"}, headers=headers)
	assert resp.status_code == 400
	assert "statut" in resp.get_json()["errors"]

	resp = client.post(
		f"/api/interventions/{iid}/diagnostic",
		json={"travailRequis": ["x" * 256]},
		headers=headers,
	)
	assert resp.status_code == 400

	resp = client.post("/api/interventions", json={"date": date.today().isoformat()}, headers=headers)
	assert resp.status_code == 400


def test_not_found(client, make_user, make_equipement, auth_header):
	user = make_user()
	headers = auth_header(user.id)

	assert client.get("/api/interventions/999999/workflow", headers=headers).status_code == 404
	assert client.put(
		"/api/interventions/999999/status", json={"statut": "EN_COURS"}, headers=headers
	).status_code == 404

	resp = client.post(
		"/api/interventions",
		json={"equipement_id": 999999, "date": date.today().isoformat()},
		headers=headers,
	)
	assert resp.status_code == 404


def test_json_keys_keep_insertion_order(app):
	assert app.json.sort_keys is False


def test_status_change_is_recorded_with_author_and_reason(client, make_user, make_equipement, auth_header, db_session):
	user = make_user("Nadia")
	headers = auth_header(user.id)
	iid = _create(client, headers, make_equipement().id, description="Inspection pompe P-12")["id"]

	resp = client.put(
		f"/api/interventions/{iid}/status",
		json={"statut": "ANNULEE", "reason": "Client a annulé"},
		headers=headers,
	)
	assert resp.status_code == 200

	rows = StatusHistory.query.filter_by(intervention_id=iid).all()
	assert len(rows) == 1
	assert rows[0].old_status == "PLANIFIEE"
	assert rows[0].new_status == "ANNULEE"
	assert rows[0].changed_by == user.id
	assert rows[0].reason == "Client a annulé"
	assert rows[0].timestamp is not None

	view = client.get(f"/api/interventions/{iid}/workflow", headers=headers).get_json()["data"]
	assert view["intervention"]["type_intervention"] == "INSPECTION"
	assert [(h["old_status"], h["new_status"], h["reason"]) for h in view["statusHistory"]] == [
		("PLANIFIEE", "ANNULEE", "Client a annulé"),
	]


def test_rejected_status_change_leaves_no_history(client, make_user, make_equipement, auth_header, db_session):
	user = make_user()
	headers = auth_header(user.id)
	iid = _create(client, headers, make_equipement().id)["id"]

	resp = client.put(f"/api/interventions/{iid}/status", json={"statut": "TERMINEE"}, headers=headers)
	assert resp.status_code == 400
	assert StatusHistory.query.filter_by(intervention_id=iid).count() == 0


def test_unknown_status_is_a_client_error(db_session, make_intervention):
	i = make_intervention()

	with pytest.raises(ApiError) as exc:
		workflow_service.transition(i.id, "FINI", reason="x", changed_by=None)

	assert exc.value.status_code == 400
	assert "statut" in exc.value.errors
	assert db_session.get(Intervention, i.id).statut.value == "PLANIFIEE"
	assert StatusHistory.query.filter_by(intervention_id=i.id).count() == 0
