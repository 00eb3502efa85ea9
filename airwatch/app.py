"""
AirWatch Flask Application.

Main entry point for the web application. Initializes:
- Database schema
- ThingSpeak ingestion pipeline
- Upstream relay over the connectivity fallback manager
- API routes

Usage:
    python -m airwatch.app

Or with gunicorn:
    gunicorn 'airwatch.app:create_app()'
"""

import logging
import os

from flask import Flask
from flask_cors import CORS

from airwatch.api import alerts_bp, analytics_bp, connectivity_bp, metrics_bp, readings_bp
from airwatch.config import config
from airwatch.connectivity import (
    ConnectivityFallbackManager,
    HttpTransportClient,
    ReadingPayload,
    SqlCacheStore,
)
from airwatch.ingestion import IngestionPipeline, SyncResult
from airwatch.models import init_db

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_relay_manager() -> ConnectivityFallbackManager:
    """Fallback manager forwarding readings upstream, with a durable offline cache."""
    manager = ConnectivityFallbackManager(
        transport=HttpTransportClient.from_config(),
        store=SqlCacheStore(),
    )
    restored = manager.load_cached()
    if restored:
        logger.info(f'Restored {restored} cached payloads awaiting upload')
    return manager


def create_app(start_ingestion: bool = True) -> Flask:
    """
    Application factory for Flask.

    Args:
        start_ingestion: Whether to start the background ingestion pipeline.
                        Set to False for testing.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Initialize database
    logger.info('Initializing database...')
    init_db()

    # Register API blueprints
    app.register_blueprint(analytics_bp)
    app.register_blueprint(readings_bp)
    app.register_blueprint(alerts_bp)
    app.register_blueprint(connectivity_bp)
    app.register_blueprint(metrics_bp)

    manager = create_relay_manager() if config.connectivity.relay_enabled else None
    app.config['CONNECTIVITY_MANAGER'] = manager

    # Initialize ingestion pipeline
    if start_ingestion and config.thingspeak.is_configured:
        pipeline = IngestionPipeline()

        if manager is not None:
            # Forward each newly stored reading upstream
            def on_ingestion_update(result: SyncResult):
                for sample in result.samples:
                    manager.send(ReadingPayload(sample))

            pipeline.add_update_callback(on_ingestion_update)

        # Start background ingestion
        pipeline.start_background()
        app.config['INGESTION_PIPELINE'] = pipeline

        logger.info(
            f'Ingestion started for ThingSpeak channel {config.thingspeak.channel_id} '
            f'every {config.ingestion.poll_interval}s'
        )
    else:
        if start_ingestion:
            logger.warning(
                'ThingSpeak not configured. Set THINGSPEAK_CHANNEL_ID and '
                'THINGSPEAK_READ_API_KEY in .env to enable ingestion'
            )
        app.config['INGESTION_PIPELINE'] = None

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    # Get port from environment or default
    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting AirWatch on http://localhost:{port}')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
        use_reloader=False,  # Disable reloader to prevent duplicate pipeline threads
    )


if __name__ == '__main__':
    run_development_server()
