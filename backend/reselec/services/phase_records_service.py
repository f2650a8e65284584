from __future__ import annotations

from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import lazyload

from reselec.extensions import db
from reselec.models.controle_qualite import ControleQualite
from reselec.models.diagnostic import (
    Diagnostic,
    DiagnosticBesoinPDR,
    DiagnosticChargeRealisee,
    DiagnosticTravailRequis,
)
from reselec.models.intervention import Intervention, InterventionStatus
from reselec.models.planification import Planification
from reselec.services.status_machine import try_transition
from reselec.services.workflow_aggregator import PhaseRecords
from reselec.utils.errors import ApiError, ConflictError, NotFoundError, StoreError


S = InterventionStatus


@contextmanager
def transaction():
    """Commit once at the end, roll everything back on any error."""
    try:
        yield db.session
        db.session.commit()
    except ApiError:
        db.session.rollback()
        raise
    except IntegrityError as exc:
        db.session.rollback()
        current_app.logger.warning("[workflow] integrity conflict: %s", exc.orig)
        raise ConflictError("Conflicting concurrent update, retry the request.") from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError(f"Database error: {exc}") from exc
    except Exception:
        db.session.rollback()
        raise


def get_intervention_or_404(intervention_id: int, for_update: bool = False) -> Intervention:
    if for_update:
        # Serializes writers on the same intervention where row locks exist (SQLite ignores it).
        intervention = (
            db.session.query(Intervention)
            .options(lazyload("*"))
            .filter(Intervention.id == intervention_id)
            .with_for_update()
            .first()
        )
    else:
        intervention = db.session.get(Intervention, intervention_id)
    if intervention is None:
        raise NotFoundError("Intervention not found")
    return intervention


def clean_list(items) -> list[str]:
    """Strip entries and drop blank ones, keeping order."""
    out: list[str] = []
    for it in items or []:
        v = str(it).strip() if it is not None else ""
        if v:
            out.append(v)
    return out


# ---------------- Read ----------------

def _read_list(model, column: str, diagnostic_id: int) -> list[str]:
    # Read path only: a failing sub-query degrades to an empty list.
    try:
        rows = (
            db.session.query(getattr(model, column))
            .filter(model.diagnostic_id == diagnostic_id)
            .order_by(model.ordre.asc(), model.id.asc())
            .all()
        )
        return [r[0] for r in rows]
    except (OperationalError, ProgrammingError):
        current_app.logger.warning("[workflow] could not read %s for diagnostic=%s", model.__tablename__, diagnostic_id)
        return []


def diagnostic_lists(diagnostic: Diagnostic | None) -> dict:
    if diagnostic is None or diagnostic.id is None:
        return {"travailRequis": [], "besoinPDR": [], "chargesRealisees": []}
    return {
        "travailRequis": _read_list(DiagnosticTravailRequis, "travail", diagnostic.id),
        "besoinPDR": _read_list(DiagnosticBesoinPDR, "besoin", diagnostic.id),
        "chargesRealisees": _read_list(DiagnosticChargeRealisee, "charge", diagnostic.id),
    }


def load_phase_records(intervention_id: int) -> PhaseRecords:
    return PhaseRecords(
        diagnostic=Diagnostic.query.filter_by(intervention_id=intervention_id).first(),
        planification=Planification.query.filter_by(intervention_id=intervention_id).first(),
        controle_qualite=ControleQualite.query.filter_by(intervention_id=intervention_id).first(),
    )


def _iso(value):
    return value.isoformat() if value is not None else None


def diagnostic_to_dict(diagnostic: Diagnostic) -> dict:
    data = {
        "id": diagnostic.id,
        "intervention_id": diagnostic.intervention_id,
        "dateCreation": _iso(diagnostic.dateCreation),
    }
    data.update(diagnostic_lists(diagnostic))
    return data


def planification_to_dict(planification: Planification) -> dict:
    return {
        "id": planification.id,
        "intervention_id": planification.intervention_id,
        "dateCreation": _iso(planification.dateCreation),
        "capaciteExecution": planification.capaciteExecution,
        "urgencePrise": bool(planification.urgencePrise),
        "disponibilitePDR": bool(planification.disponibilitePDR),
    }


def controle_qualite_to_dict(controle: ControleQualite) -> dict:
    return {
        "id": controle.id,
        "intervention_id": controle.intervention_id,
        "dateControle": _iso(controle.dateControle),
        "resultatsEssais": controle.resultatsEssais,
        "analyseVibratoire": controle.analyseVibratoire,
    }


# ---------------- Write ----------------

def create_initial_diagnostic(intervention: Intervention) -> Diagnostic:
    """Empty diagnostic opened at intake. Caller owns the transaction."""
    diagnostic = Diagnostic(intervention=intervention)
    db.session.add(diagnostic)
    return diagnostic


def upsert_diagnostic(
    intervention_id: int,
    work_items: list[str] | None,
    spare_parts: list[str] | None,
    charges_done: list[str] | None,
) -> Diagnostic:
    travaux = clean_list(work_items)
    besoins = clean_list(spare_parts)
    charges = clean_list(charges_done)

    with transaction():
        intervention = get_intervention_or_404(intervention_id, for_update=True)

        diagnostic = Diagnostic.query.filter_by(intervention_id=intervention.id).first()
        if diagnostic is None:
            diagnostic = Diagnostic(intervention_id=intervention.id)
            db.session.add(diagnostic)

        # Whole-list replacement: orphans are deleted, new rows inserted.
        diagnostic.travaux = [DiagnosticTravailRequis(travail=v, ordre=i) for i, v in enumerate(travaux)]
        diagnostic.besoins = [DiagnosticBesoinPDR(besoin=v, ordre=i) for i, v in enumerate(besoins)]
        diagnostic.charges = [DiagnosticChargeRealisee(charge=v, ordre=i) for i, v in enumerate(charges)]

        if travaux or besoins or charges:
            try_transition(intervention, S.PLANNED, S.AWAITING_PARTS)

        db.session.flush()

    current_app.logger.info(
        "[workflow] diagnostic saved intervention=%s travaux=%s pdr=%s charges=%s statut=%s",
        intervention_id, len(travaux), len(besoins), len(charges), intervention.statut.value,
    )
    return diagnostic


def upsert_planification(
    intervention_id: int,
    capacity: int | None,
    urgency_ack: bool,
    parts_available: bool,
) -> Planification:
    with transaction():
        intervention = get_intervention_or_404(intervention_id, for_update=True)

        planification = Planification.query.filter_by(intervention_id=intervention.id).first()
        if planification is None:
            planification = Planification(intervention_id=intervention.id)
            db.session.add(planification)

        planification.capaciteExecution = capacity
        planification.urgencePrise = bool(urgency_ack)
        planification.disponibilitePDR = bool(parts_available)

        if planification.disponibilitePDR:
            try_transition(intervention, S.AWAITING_PARTS, S.IN_PROGRESS)

        db.session.flush()

    current_app.logger.info(
        "[workflow] planification saved intervention=%s pdr=%s statut=%s",
        intervention_id, planification.disponibilitePDR, intervention.statut.value,
    )
    return planification


def upsert_quality_control(
    intervention_id: int,
    test_results: str | None,
    vibration_analysis: str | None,
) -> ControleQualite:
    with transaction():
        intervention = get_intervention_or_404(intervention_id, for_update=True)

        controle = ControleQualite.query.filter_by(intervention_id=intervention.id).first()
        if controle is None:
            controle = ControleQualite(intervention_id=intervention.id)
            db.session.add(controle)

        controle.resultatsEssais = test_results
        controle.analyseVibratoire = vibration_analysis
        db.session.flush()

    current_app.logger.info("[workflow] controle qualite saved intervention=%s", intervention_id)
    return controle
