import logging
import os

from flask import Flask, send_from_directory
from app.extensions import db, migrate, jwt
from flask_cors import CORS
from config import Config


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.debug and not app.testing:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s %(levelname)s %(name)s: %(message)s'
        )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    CORS(app) # Enable CORS for all routes

    from app.utils.api_response import register_jwt_handlers
    register_jwt_handlers(jwt)

    # Register Blueprints
    from app.api import register_blueprints
    register_blueprints(app)

    from app.db_init.cli import register_commands
    register_commands(app)

    # Locally stored documents are served straight from the upload folder
    if not app.config.get('GCS_BUCKET_NAME'):
        upload_root = os.path.abspath(app.config['UPLOAD_FOLDER'])

        @app.route(f"{app.config['UPLOAD_BASE_URL'].rstrip('/')}/<path:object_key>")
        def uploaded_file(object_key):
            return send_from_directory(upload_root, object_key)

    return app
