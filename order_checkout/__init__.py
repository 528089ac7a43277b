"""Flask application factory."""
import os

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from order_checkout.database import init_db


def create_app(config_object='config.Config', external_coupon_resolver=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Sentry error tracking in production
    if os.getenv('SENTRY_DSN') and (app.config.get('ENV') == 'production' or os.getenv('FLASK_ENV') == 'production'):
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=os.getenv('FLASK_ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    from order_checkout.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    init_db(app)

    from order_checkout.services.checkout_service import init_checkout
    init_checkout(app, external_resolver=external_coupon_resolver)

    from order_checkout.middleware import load_user

    @app.before_request
    def before_request_handler():
        """Load the caller for each request."""
        load_user()

    # Error Handlers
    from order_checkout.exceptions import CheckoutError

    @app.errorhandler(CheckoutError)
    def handle_checkout_error(error):
        """Render checkout exceptions as JSON."""
        if error.status_code >= 500:
            app.logger.error(f"CheckoutError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"CheckoutError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'status': 'error', 'message': error.name}), error.code

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.exception(f"Unhandled Exception: {error}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from order_checkout.blueprints.checkout import checkout_bp
    from order_checkout.blueprints.metrics import metrics_bp

    app.register_blueprint(checkout_bp)
    app.register_blueprint(metrics_bp)

    from order_checkout.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
