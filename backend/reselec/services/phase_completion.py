from __future__ import annotations

import enum

from reselec.models.controle_qualite import ControleQualite
from reselec.models.diagnostic import Diagnostic
from reselec.models.planification import Planification


class Phase(str, enum.Enum):
    DIAGNOSTIC = "DIAGNOSTIC"
    PLANIFICATION = "PLANIFICATION"
    CONTROLE_QUALITE = "CONTROLE_QUALITE"


def _has_text(value) -> bool:
    return bool(str(value or "").strip())


def diagnostic_complete(diagnostic: Diagnostic | None) -> bool:
    # Any stored diagnostic has a creation date, so this is "exists" in practice.
    return diagnostic is not None and diagnostic.dateCreation is not None


def planification_complete(planification: Planification | None) -> bool:
    if planification is None:
        return False
    return planification.disponibilitePDR is True and planification.capaciteExecution is not None


def quality_control_complete(controle: ControleQualite | None) -> bool:
    if controle is None:
        return False
    return _has_text(controle.resultatsEssais) or _has_text(controle.analyseVibratoire)


_PREDICATES = {
    Phase.DIAGNOSTIC: diagnostic_complete,
    Phase.PLANIFICATION: planification_complete,
    Phase.CONTROLE_QUALITE: quality_control_complete,
}


def phase_complete(phase: Phase, record) -> bool:
    return _PREDICATES[Phase(phase)](record)
