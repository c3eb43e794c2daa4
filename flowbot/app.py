"""
Application factory
"""

# Python Packages
from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate

# Local Imports
from .base import constants
from .config.swagger import api
from .config.urls import URLs
from .config.database import init_db, db
from .util.logger import configure_logging





def create_app(test_config: dict = None):
    """
    Application Factory

    Args:
        test_config: Flask config overrides (tests point the database at
                     SQLite here).
    """

    configure_logging()

    # App Object
    app = Flask(__name__)
    app.config["DEBUG"] = constants.APP_ENV == "development"
    app.config["SECRET_KEY"] = constants.APP_SECRET_KEY

    if test_config:
        app.config.update(test_config)

    # Initialize Database
    init_db(app)

    # Register models
    from . import models

    # Initialize Migration
    Migrate(app, db)

    # Enable CORS
    CORS(app)

    # Initialize Swagger
    api.init_app(app)

    # Register Namespaces
    URLs.add_namespaces()

    return app
