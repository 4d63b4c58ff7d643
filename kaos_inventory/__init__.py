"""Flask application factory."""
import logging

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from kaos_inventory.database import init_db, create_tables


def create_app(config_object='kaos_inventory.config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json.sort_keys = False

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Sentry error tracking in production only
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
        )

    from kaos_inventory.blueprints.metrics import setup_metrics_instrumentation, record_rejection
    setup_metrics_instrumentation(app)

    # Initialize database
    init_db(app)
    if app.config.get('TESTING'):
        create_tables()

    # Error Handlers
    from kaos_inventory.exceptions import KaosError

    @app.errorhandler(KaosError)
    def handle_kaos_error(error):
        """Application errors: JSON body with the error's status code."""
        app.logger.warning(
            f"{type(error).__name__} [{error.status_code}] {request.method} {request.path}: {error.message}"
        )
        record_rejection(error)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception on {request.method} {request.path}: {error}", exc_info=error)
        return jsonify({'status': 'error', 'message': 'Terjadi kesalahan server'}), 500

    # Register blueprints
    from kaos_inventory.blueprints.main import main_bp
    from kaos_inventory.blueprints.metrics import metrics_bp
    from kaos_inventory.blueprints.products import products_bp
    from kaos_inventory.blueprints.resellers import resellers_bp
    from kaos_inventory.blueprints.consignments import consignments_bp
    from kaos_inventory.blueprints.sales import sales_bp
    from kaos_inventory.blueprints.dashboard import dashboard_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(resellers_bp)
    app.register_blueprint(consignments_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(dashboard_bp)

    # Register CLI commands
    from kaos_inventory.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"Kaos Inventory started (env={app.config.get('ENV')})")
    return app
