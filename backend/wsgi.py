import os

from reselec import create_app
from reselec.config import DevConfig, ProdConfig


def _is_production() -> bool:
    return os.getenv("FLASK_ENV", "").lower() == "production" or bool(os.getenv("RESELEC_PRODUCTION"))


config = ProdConfig if _is_production() else DevConfig
app = create_app(config)

if __name__ == "__main__":
    app.run()
