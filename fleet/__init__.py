import logging

from flask import Flask

from .config import Config
from .controllers.customers import bp as customers_bp
from .controllers.errors import register_error_handlers
from .controllers.reservations import bp as reservations_bp
from .controllers.vehicles import bp as vehicles_bp
from .models.store import Store


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.from_prefixed_env("FLEET")

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    Store.instance(app.config.get("DATA_PATH"))  # load data.pkl or start empty
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(reservations_bp)
    register_error_handlers(app)

    return app
