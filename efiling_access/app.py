"""
E-filing access API - Flask application factory

Embeds the scoping service behind a small HTTP surface: recipient
resolution, visibility predicates and a health check. Distribution and
listing flows in the surrounding application may equally call the service
in-process.
"""

from datetime import datetime, timezone
from typing import Optional
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag

from .middleware.error_handler import ErrorHandlerMiddleware
from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .routes.scoping import scoping_bp
from .services.directory import MongoEntityDirectory
from .services.scoping import ScopingService, create_scoping_service
from .settings import ScopingSettings, get_scoping_settings

info = Info(
    title="E-filing Access API",
    version="1.0.0",
    description="Recipient resolution and geography-scoped visibility for e-filing"
)

tags = [
    Tag(name="Scoping", description="Recipient resolution and visibility scoping"),
    Tag(name="Health", description="System health and status")
]


def create_app(scoping_service: Optional[ScopingService] = None,
               settings: Optional[ScopingSettings] = None) -> OpenAPI:
    """
    Create the Flask application.

    Args:
        scoping_service: Service to expose (defaults to the MongoDB-backed one)
        settings: Process settings (defaults to the environment)

    Returns:
        Configured OpenAPI (Flask) application
    """
    settings = settings or get_scoping_settings()

    # Initialize observability first
    setup_observability(settings)

    app = OpenAPI(__name__, info=info)
    app.config['ENVIRONMENT'] = settings.environment
    app.config['BASE_URL'] = settings.base_url

    add_observability_middleware(app)
    ErrorHandlerMiddleware(app, settings.base_url)

    app.scoping_service = scoping_service or create_scoping_service(settings)

    app.register_api(scoping_bp)

    @app.get('/api/healthz', tags=[tags[1]])
    def health_check():
        """Health check including the entity directory."""
        directory = app.scoping_service.directory
        if isinstance(directory, MongoEntityDirectory):
            directory_health = directory.mongodb_service.health_check()
        else:
            directory_health = {"status": "healthy", "backend": directory.__class__.__name__}

        status = directory_health.get("status", "unhealthy")
        return jsonify({
            "status": status,
            "service": "efiling-access",
            "version": settings.service_version,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "directory": directory_health
        }), 200 if status == "healthy" else 503

    return app
