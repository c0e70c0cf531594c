import logging
import os
from flask import Flask
from flask_migrate import Migrate

from config import Config
from models import db, bcrypt
from portal.errors import register_error_handlers
from portal.services import PortalServices
from portal.tokens import jwt

migrate = Migrate()


def create_app(config=None, checkers=None):
    """Build the portal app around one Config; ``checkers`` replaces the placeholder check services."""
    config = config or Config()
    logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    app = Flask(__name__)
    app.config.from_object(config)

    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    PortalServices(config, checkers).init_app(app)
    os.makedirs(config.UPLOAD_FOLDER, exist_ok=True)

    from portal.auth import auth
    from portal.theses import theses
    from portal.users import users

    app.register_blueprint(auth)
    app.register_blueprint(theses)
    app.register_blueprint(users)
    register_error_handlers(app)

    from portal.commands import create_admin_command, init_db_command
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)

    @app.route('/')
    def index():
        return {'message': 'API Running'}

    return app


if (__name__ == "__main__"):
    app = create_app()
    with app.app_context():
        db.create_all()

    app.run(port=app.config['PORT'], debug=app.config['DEBUG'])
