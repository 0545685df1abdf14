from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData
from flask_migrate import Migrate
from flask_bcrypt import Bcrypt


# 1. Create extension instances WITHOUT an app
# They will be "connected" to the app inside the factory

# Define naming convention for SQLAlchemy
convention = {
    "ix": 'ix_%(column_0_label)s',
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}
metadata = MetaData(naming_convention=convention)

db = SQLAlchemy(metadata=metadata)
bcrypt = Bcrypt()
migrate = Migrate()

from flask_login import LoginManager
login_manager = LoginManager()


def create_app(config_class='config.Config'):
    """
    Application Factory Function
    """

    app = Flask(__name__, instance_relative_config=True)

    # Load configuration from the config.py file
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register Blueprints
    # Imports are *inside* the factory to avoid circular import issues
    with app.app_context():
        from .tickets_routes import tickets_bp
        from .staff_routes import staff_bp
        from .wallets_routes import wallets_bp

        # Import models so SQLAlchemy knows about them
        from . import models
        from .services import build_services

        # Services are wired once; mint mode and signing key are fixed from here on.
        app.extensions['ticketing'] = build_services(app.config)

        app.register_blueprint(tickets_bp)
        app.register_blueprint(staff_bp)
        app.register_blueprint(wallets_bp)

    # Register CLI commands
    from app.commands.create_event import create_event
    from app.commands.create_staff import create_staff
    from app.commands.reconcile_mints import reconcile_mints

    app.cli.add_command(create_event)
    app.cli.add_command(create_staff)
    app.cli.add_command(reconcile_mints)

    return app
