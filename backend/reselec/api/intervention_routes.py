from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from reselec.schemas.workflow_schemas import InterventionCreateSchema
from reselec.services import workflow_service
from reselec.utils.responses import success_response
from reselec.utils.security import current_utilisateur_id, require_utilisateur

bp = Blueprint("interventions", __name__)

intervention_create_schema = InterventionCreateSchema()


@bp.post("")
@jwt_required()
def creer_intervention():
    """
    Opens a maintenance job for a piece of equipment.
    Body JSON:
    {
      "equipement_id": 1,
      "date": "2025-03-10",
      "description": "Pompe centrifuge, fuite garniture",
      "urgence": false
    }
    """
    utilisateur = require_utilisateur(current_utilisateur_id())

    json_data = request.get_json() or {}
    data = intervention_create_schema.load(json_data)
    intervention = workflow_service.create_intervention(data, utilisateur.id)

    return success_response(
        message="Intervention created",
        data=intervention,
        status_code=201,
    )


@bp.get("/<int:intervention_id>")
@jwt_required()
def obtenir_intervention(intervention_id: int):
    return success_response(data=workflow_service.get_intervention(intervention_id))
