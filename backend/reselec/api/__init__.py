from .intervention_routes import bp as interventions_bp
from .workflow_routes import bp as workflow_bp

__all__ = [
    "interventions_bp",
    "workflow_bp",
]
