"""Derived workflow views: progress, next actions, advanceability, timeline.

Everything here is computed from an intervention and its (possibly missing)
phase records. Nothing is written.
"""

from __future__ import annotations

import math
from datetime import date
from typing import NamedTuple

from reselec.models.controle_qualite import ControleQualite
from reselec.models.diagnostic import Diagnostic
from reselec.models.intervention import Intervention, InterventionStatus
from reselec.models.planification import Planification
from reselec.services.phase_completion import (
    Phase,
    diagnostic_complete,
    phase_complete,
    planification_complete,
    quality_control_complete,
)
from reselec.services.status_machine import allowed_transitions, parse_status


S = InterventionStatus


class PhaseRecords(NamedTuple):
    diagnostic: Diagnostic | None = None
    planification: Planification | None = None
    controle_qualite: ControleQualite | None = None

    def get(self, phase: Phase):
        return {
            Phase.DIAGNOSTIC: self.diagnostic,
            Phase.PLANIFICATION: self.planification,
            Phase.CONTROLE_QUALITE: self.controle_qualite,
        }[phase]


NEXT_ACTIONS: dict[InterventionStatus, tuple[str, ...]] = {
    S.PLANNED: ("Complete diagnostic phase",),
    S.AWAITING_PARTS: ("Update planning and resource availability",),
    S.IN_PROGRESS: ("Perform maintenance work", "Add quality control results"),
    S.PAUSED: ("Resume work",),
    S.COMPLETED: ("Generate final report",),
    S.CANCELLED: ("Reactivate intervention if work is still required",),
    S.FAILED: ("Review failure cause", "Restart intervention"),
}

URGENT_ACTION = "URGENT: handle this intervention with priority"

# Phase whose completion lets the current status move forward
GATING_PHASE: dict[InterventionStatus, Phase] = {
    S.PLANNED: Phase.DIAGNOSTIC,
    S.AWAITING_PARTS: Phase.PLANIFICATION,
    S.IN_PROGRESS: Phase.CONTROLE_QUALITE,
}

_QC_FAILURE_MARKERS = ("échec", "echec", "problème", "probleme")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_progress(intervention: Intervention, records: PhaseRecords) -> dict:
    """Completed steps over existing steps.

    The intervention itself is one step, always done. Each existing phase record
    adds one step, done only when its predicate holds. A phase that was never
    started does not count at all, so an intervention with only a finished
    diagnostic is at 100%. TERMINEE forces every step to done.
    """
    total = 1
    completed = 1
    for phase in Phase:
        record = records.get(phase)
        if record is None:
            continue
        total += 1
        if phase_complete(phase, record):
            completed += 1

    if parse_status(intervention.statut) == S.COMPLETED:
        completed = total

    return {
        "completed": completed,
        "total": total,
        "percentage": _round_half_up(100 * completed / total),
    }


def next_actions(intervention: Intervention) -> list[str]:
    status = parse_status(intervention.statut)
    actions = list(NEXT_ACTIONS[status])
    if intervention.urgence and status != S.COMPLETED:
        actions.insert(0, URGENT_ACTION)
    return actions


def can_advance(intervention: Intervention, records: PhaseRecords) -> bool:
    phase = GATING_PHASE.get(parse_status(intervention.statut))
    if phase is None:
        return False
    return phase_complete(phase, records.get(phase))


def quality_validated(controle: ControleQualite | None) -> bool:
    """Results recorded and none of them reports a failure."""
    if not quality_control_complete(controle):
        return False
    resultats = (controle.resultatsEssais or "").lower()
    return not any(marker in resultats for marker in _QC_FAILURE_MARKERS)


def current_phase(records: PhaseRecords) -> str:
    if records.diagnostic is None:
        return "DIAGNOSTIC"
    if records.planification is None or not records.planification.disponibilitePDR:
        return "PLANIFICATION"
    if records.controle_qualite is None:
        return "EXECUTION"
    if not quality_validated(records.controle_qualite):
        return "CONTROLE_QUALITE"
    return "TERMINE"


def _timeline_entry(phase: str, when: date | None, done: bool, description: str, user: str | None) -> dict:
    return {
        "phase": phase,
        "date": when,
        "status": "completed" if done else "in_progress",
        "description": description,
        "user": user,
    }


def build_timeline(intervention: Intervention, records: PhaseRecords) -> list[dict]:
    """One entry per existing record, oldest first.

    Entries without a date go last; entries sharing a date keep workflow order
    (creation, diagnostic, planification, quality control) since the sort is stable.
    """
    creator = intervention.creerPar.nom if intervention.creerPar is not None else None
    entries = [
        _timeline_entry("CREATION", intervention.date, True, "Intervention created", creator),
    ]

    d = records.diagnostic
    if d is not None:
        done = diagnostic_complete(d)
        entries.append(_timeline_entry(
            "DIAGNOSTIC",
            d.dateCreation,
            done,
            "Diagnostic phase completed" if done else "Diagnostic in progress",
            creator,
        ))

    p = records.planification
    if p is not None:
        done = planification_complete(p)
        entries.append(_timeline_entry(
            "PLANIFICATION",
            p.dateCreation,
            done,
            "Planning validated, spare parts available" if done else "Planning updated",
            creator,
        ))

    q = records.controle_qualite
    if q is not None:
        done = quality_control_complete(q)
        entries.append(_timeline_entry(
            "CONTROLE_QUALITE",
            q.dateControle,
            done,
            "Quality control performed" if done else "Quality control pending results",
            creator,
        ))

    entries.sort(key=lambda e: (e["date"] is None, e["date"] or date.min))
    return entries


def is_overdue(
    intervention: Intervention,
    today: date | None = None,
    normal_days: int = 7,
    urgent_days: int = 3,
) -> bool:
    status = parse_status(intervention.statut)
    if status in (S.COMPLETED, S.CANCELLED) or intervention.date is None:
        return False
    today = today or date.today()
    threshold = urgent_days if intervention.urgence else normal_days
    return (today - intervention.date).days > threshold


_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("MAINTENANCE_PREVENTIVE", ("préventive", "preventive")),
    ("MAINTENANCE_CORRECTIVE", ("corrective",)),
    ("REPARATION", ("réparation", "reparation")),
    ("RENOVATION", ("rénovation", "renovation")),
    ("INSPECTION", ("inspection",)),
)

DEFAULT_INTERVENTION_TYPE = "MAINTENANCE_CORRECTIVE"


def intervention_type(intervention: Intervention) -> str:
    """Kind of job, guessed from keywords in the description. First match wins."""
    description = (intervention.description or "").lower()
    for kind, keywords in _TYPE_KEYWORDS:
        if any(k in description for k in keywords):
            return kind
    return DEFAULT_INTERVENTION_TYPE


def rapport_summary(rapports) -> dict:
    rapports = list(rapports or [])
    return {
        "completed": len(rapports) > 0,
        "count": len(rapports),
        "validated": any(bool(r.validation) for r in rapports),
    }


def aggregate(
    intervention: Intervention,
    records: PhaseRecords,
    today: date | None = None,
    normal_days: int = 7,
    urgent_days: int = 3,
) -> dict:
    status = parse_status(intervention.statut)
    return {
        "progress": compute_progress(intervention, records),
        "nextActions": next_actions(intervention),
        "canAdvance": can_advance(intervention, records),
        "timeline": build_timeline(intervention, records),
        "currentPhase": current_phase(records),
        "availableTransitions": [s.value for s in allowed_transitions(status)],
        "priorite": "HAUTE" if intervention.urgence else "NORMALE",
        "type_intervention": intervention_type(intervention),
        "overdue": is_overdue(intervention, today, normal_days, urgent_days),
    }
