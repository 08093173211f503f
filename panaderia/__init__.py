"""Flask application factory."""
import logging
import os
import traceback

from flask import Flask, jsonify
from sqlalchemy import inspect
from werkzeug.exceptions import HTTPException

from panaderia.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Sentry error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Initialize database
    init_db(app)
    _seed_exchange_rate(app)

    # Caller identity from upstream auth
    from panaderia.middleware import load_caller

    @app.before_request
    def before_request_handler():
        load_caller()

    # Error Handlers
    from panaderia.exceptions import PanaderiaError

    @app.errorhandler(PanaderiaError)
    def handle_panaderia_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"{type(error).__name__} [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"{type(error).__name__} [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from panaderia.blueprints.sales import sales_bp
    from panaderia.blueprints.orders import orders_bp
    from panaderia.blueprints.settings import settings_bp
    from panaderia.blueprints.waste import waste_bp

    app.register_blueprint(sales_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(waste_bp)

    # Register CLI commands
    from panaderia.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app


def _seed_exchange_rate(app):
    """Store the configured exchange rate if the schema exists and none is set yet."""
    from panaderia.database import get_engine, get_session
    from panaderia.services.settings_service import seed_default_exchange_rate

    if not inspect(get_engine()).has_table('system_setting'):
        app.logger.info("Tabla system_setting ausente; ejecute 'flask db-upgrade'")
        return

    db_session = get_session()
    try:
        seed_default_exchange_rate(db_session, app.config.get('DEFAULT_EXCHANGE_RATE'))
    finally:
        db_session.remove()
