from __future__ import annotations

from flask import current_app

from reselec.extensions import db
from reselec.models.equipement import Equipement
from reselec.models.intervention import Intervention, InterventionStatus
from reselec.models.rapport import Rapport
from reselec.models.status_history import StatusHistory
from reselec.models.utilisateur import Utilisateur
from reselec.services import phase_records_service as store
from reselec.services.phase_completion import (
    diagnostic_complete,
    planification_complete,
    quality_control_complete,
)
from reselec.services.status_machine import INITIAL_STATUS, parse_status, request_transition
from reselec.services.workflow_aggregator import aggregate, quality_validated, rapport_summary
from reselec.utils.errors import ApiError, InvalidTransitionError, NotFoundError


def intervention_to_dict(intervention: Intervention) -> dict:
    equipement = intervention.equipement
    creer_par = intervention.creerPar
    return {
        "id": intervention.id,
        "date": intervention.date.isoformat() if intervention.date else None,
        "description": intervention.description,
        "statut": parse_status(intervention.statut).value,
        "urgence": bool(intervention.urgence),
        "equipement_id": intervention.equipement_id,
        "creerPar_id": intervention.creerPar_id,
        "equipement": {"id": equipement.id, "nom": equipement.nom} if equipement else None,
        "creerPar": {"id": creer_par.id, "nom": creer_par.nom} if creer_par else None,
    }


def get_intervention(intervention_id: int) -> dict:
    return intervention_to_dict(store.get_intervention_or_404(intervention_id))


def create_intervention(data: dict, creator_id: int) -> dict:
    """Job intake. A PLANIFIEE intervention starts with an empty diagnostic."""
    statut = parse_status(data.get("statut") or INITIAL_STATUS)

    with store.transaction():
        if db.session.get(Equipement, data["equipement_id"]) is None:
            raise NotFoundError("Equipment not found")
        if db.session.get(Utilisateur, creator_id) is None:
            raise NotFoundError("User not found")

        intervention = Intervention(
            date=data["date"],
            description=data.get("description"),
            statut=statut,
            urgence=bool(data.get("urgence", False)),
            equipement_id=data["equipement_id"],
            creerPar_id=creator_id,
        )
        db.session.add(intervention)

        if statut == InterventionStatus.PLANNED:
            store.create_initial_diagnostic(intervention)

        db.session.flush()

    current_app.logger.info(
        "[workflow] intervention created id=%s statut=%s creerPar=%s", intervention.id, statut.value, creator_id
    )
    return intervention_to_dict(intervention)


def get_workflow(intervention_id: int) -> dict:
    intervention = store.get_intervention_or_404(intervention_id)
    records = store.load_phase_records(intervention.id)
    rapports = Rapport.query.filter_by(intervention_id=intervention.id).order_by(Rapport.id.asc()).all()

    derived = aggregate(
        intervention,
        records,
        normal_days=current_app.config.get("OVERDUE_DAYS_NORMAL", 7),
        urgent_days=current_app.config.get("OVERDUE_DAYS_URGENT", 3),
    )

    d, p, q = records.diagnostic, records.planification, records.controle_qualite

    diagnostic = {"exists": d is not None, "completed": diagnostic_complete(d)}
    diagnostic.update(store.diagnostic_to_dict(d) if d is not None else store.diagnostic_lists(None))

    planification = {"exists": p is not None, "completed": planification_complete(p)}
    if p is not None:
        planification.update(store.planification_to_dict(p))

    controle = {
        "exists": q is not None,
        "completed": quality_control_complete(q),
        "validationTechnique": quality_validated(q),
    }
    if q is not None:
        controle.update(store.controle_qualite_to_dict(q))

    intervention_data = intervention_to_dict(intervention)
    intervention_data["priorite"] = derived.pop("priorite")
    intervention_data["type_intervention"] = derived.pop("type_intervention")

    timeline = [
        dict(entry, date=entry["date"].isoformat() if entry["date"] else None)
        for entry in derived.pop("timeline")
    ]

    return {
        "intervention": intervention_data,
        "statut": intervention_data["statut"],
        "phases": {
            "diagnostic": diagnostic,
            "planification": planification,
            "controleQualite": controle,
            "rapport": rapport_summary(rapports),
        },
        "timeline": timeline,
        "statusHistory": list_status_history(intervention.id),
        **derived,
    }


def submit_diagnostic(intervention_id: int, data: dict) -> dict:
    diagnostic = store.upsert_diagnostic(
        intervention_id,
        data.get("travailRequis"),
        data.get("besoinPDR"),
        data.get("chargesRealisees"),
    )
    return store.diagnostic_to_dict(diagnostic)


def submit_planification(intervention_id: int, data: dict) -> dict:
    planification = store.upsert_planification(
        intervention_id,
        data.get("capaciteExecution"),
        data.get("urgencePrise", False),
        data.get("disponibilitePDR", False),
    )
    return store.planification_to_dict(planification)


def submit_quality_control(intervention_id: int, data: dict) -> dict:
    controle = store.upsert_quality_control(
        intervention_id,
        data.get("resultatsEssais"),
        data.get("analyseVibratoire"),
    )
    return store.controle_qualite_to_dict(controle)


def status_history_to_dict(entry: StatusHistory) -> dict:
    return {
        "id": entry.id,
        "old_status": entry.old_status,
        "new_status": entry.new_status,
        "changed_by": entry.changed_by,
        "reason": entry.reason,
        "timestamp": entry.timestamp.isoformat() if entry.timestamp else None,
    }


def list_status_history(intervention_id: int) -> list[dict]:
    rows = (
        StatusHistory.query.filter_by(intervention_id=intervention_id)
        .order_by(StatusHistory.id.asc())
        .all()
    )
    return [status_history_to_dict(r) for r in rows]


def transition(
    intervention_id: int,
    target: str | InterventionStatus,
    reason: str | None = None,
    changed_by: int | None = None,
) -> dict:
    """Manual status change. Every accepted change leaves a StatusHistory row."""
    try:
        target = parse_status(target)
    except ValueError:
        raise ApiError(
            "Validation failed",
            400,
            errors={"statut": [f"Unknown status: {target}"]},
        )

    with store.transaction():
        intervention = store.get_intervention_or_404(intervention_id, for_update=True)
        old = parse_status(intervention.statut)
        try:
            request_transition(intervention, target)
        except InvalidTransitionError:
            current_app.logger.info(
                "[workflow] transition rejected intervention=%s %s -> %s", intervention_id, old.value, target.value
            )
            raise

        db.session.add(StatusHistory(
            intervention_id=intervention.id,
            old_status=old.value,
            new_status=target.value,
            changed_by=changed_by,
            reason=reason,
        ))

    current_app.logger.info(
        "[workflow] transition intervention=%s %s -> %s by=%s reason=%s",
        intervention_id, old.value, target.value, changed_by, reason or "-",
    )
    return intervention_to_dict(intervention)
