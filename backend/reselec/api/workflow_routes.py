from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from reselec.schemas.workflow_schemas import (
    ControleQualiteSchema,
    DiagnosticSchema,
    PlanificationSchema,
    StatusTransitionSchema,
)
from reselec.services import workflow_service
from reselec.utils.responses import success_response
from reselec.utils.security import current_utilisateur_id

bp = Blueprint("workflow", __name__)

diagnostic_schema = DiagnosticSchema()
planification_schema = PlanificationSchema()
controle_qualite_schema = ControleQualiteSchema()
status_transition_schema = StatusTransitionSchema()


@bp.get("/<int:intervention_id>/workflow")
@jwt_required()
def obtenir_workflow(intervention_id: int):
    """Full workflow view: phases, progress, next actions, timeline."""
    return success_response(data=workflow_service.get_workflow(intervention_id))


@bp.post("/<int:intervention_id>/diagnostic")
@jwt_required()
def soumettre_diagnostic(intervention_id: int):
    """
    Creates or replaces the diagnostic.
    Body JSON:
    {
      "travailRequis": ["Rebobinage stator"],
      "besoinPDR": ["Roulement 6205"],
      "chargesRealisees": []
    }
    Any non-blank entry moves a PLANIFIEE intervention to EN_ATTENTE_PDR.
    """
    data = diagnostic_schema.load(request.get_json() or {})
    diagnostic = workflow_service.submit_diagnostic(intervention_id, data)
    return success_response(message="Diagnostic saved", data=diagnostic)


@bp.put("/<int:intervention_id>/planification")
@jwt_required()
def soumettre_planification(intervention_id: int):
    data = planification_schema.load(request.get_json() or {})
    planification = workflow_service.submit_planification(intervention_id, data)
    return success_response(message="Planning saved", data=planification)


@bp.post("/<int:intervention_id>/controle-qualite")
@jwt_required()
def soumettre_controle_qualite(intervention_id: int):
    data = controle_qualite_schema.load(request.get_json() or {})
    controle = workflow_service.submit_quality_control(intervention_id, data)
    return success_response(
        message="Quality control saved",
        data=controle,
        status_code=201,
    )


@bp.put("/<int:intervention_id>/status")
@jwt_required()
def changer_statut(intervention_id: int):
    """
    Manual status change.
    Body JSON: {"statut": "EN_PAUSE", "reason": "Attente client"}
    Rejected transitions answer 400 with the allowed targets in the payload.
    """
    data = status_transition_schema.load(request.get_json() or {})
    intervention = workflow_service.transition(
        intervention_id,
        data["statut"],
        reason=data.get("reason"),
        changed_by=current_utilisateur_id(),
    )
    return success_response(message="Status updated", data=intervention)
