from marshmallow import fields, validate

from reselec.extensions.ma import ma
from reselec.models.intervention import InterventionStatus

STATUT_VALUES = [s.value for s in InterventionStatus]


def _item_list():
    return fields.List(
        fields.String(validate=validate.Length(max=255)),
        load_default=list,
    )


class InterventionCreateSchema(ma.Schema):
    """
    Job intake.
    Body JSON:
    {
      "equipement_id": 1,
      "date": "2025-03-10",
      "description": "Moteur 15 kW, bruit anormal",
      "urgence": true
    }
    """

    equipement_id = fields.Integer(required=True)
    date = fields.Date(required=True)
    description = fields.String(load_default=None, allow_none=True)
    urgence = fields.Boolean(load_default=False)
    statut = fields.String(
        load_default=None,
        allow_none=True,
        validate=validate.OneOf(STATUT_VALUES),
    )


class DiagnosticSchema(ma.Schema):
    travailRequis = _item_list()
    besoinPDR = _item_list()
    chargesRealisees = _item_list()


class PlanificationSchema(ma.Schema):
    capaciteExecution = fields.Integer(
        load_default=None,
        allow_none=True,
        validate=validate.Range(min=0),
    )
    urgencePrise = fields.Boolean(load_default=False)
    disponibilitePDR = fields.Boolean(load_default=False)


class ControleQualiteSchema(ma.Schema):
    resultatsEssais = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=2000))
    analyseVibratoire = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=2000))


class StatusTransitionSchema(ma.Schema):
    statut = fields.String(required=True, validate=validate.OneOf(STATUT_VALUES))
    reason = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=500))
