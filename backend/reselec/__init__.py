import pymysql
pymysql.install_as_MySQLdb()
from flask import Flask
from flask_cors import CORS

from .config import DevConfig
from .extensions import db, migrate, jwt, ma
from .utils.errors import register_error_handlers
from .api import (
    intervention_routes,
    workflow_routes,
)


def create_app(config_class=DevConfig) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.sort_keys = False

    # Comma separated list, "*" allowed in development
    origins = [o.strip() for o in str(app.config.get("CORS_ORIGINS", "")).split(",") if o.strip()]
    CORS(
        app,
        resources={r"/api/*": {"origins": origins or "*"}},
        supports_credentials=True,
    )

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)

    # Blueprints
    app.register_blueprint(intervention_routes.bp, url_prefix="/api/interventions")
    app.register_blueprint(workflow_routes.bp, url_prefix="/api/interventions")

    register_error_handlers(app)

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "service": "reselec-workflow-backend"}

    return app
