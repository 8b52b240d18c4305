"""
Content rating API package.

This package contains the Flask application factory, the PICS labeling
middleware and the blueprints of the content rating service.

Blueprints:
- ratings: health, rating system discovery, label validation and previews
"""

import os

from flask import Flask

__version__ = "1.1.0"

def _blueprints():
    """All blueprints for registration, as (blueprint, url_prefix) tuples."""
    from api.ratings import ratings_bp

    return [
        (ratings_bp, ""),
    ]


def register_blueprints(app: Flask) -> None:
    """Register all blueprints with the Flask app."""
    for blueprint, url_prefix in _blueprints():
        app.register_blueprint(blueprint, url_prefix=url_prefix)


def create_app(active_systems: list[str] | None = None, configure_logs: bool = True) -> Flask:
    """
    Create the Flask application.

    Args:
        active_systems: Rating system identifiers to activate
            (defaults to PICS_ACTIVE_SYSTEMS)
        configure_logs: Install the logging configuration from LOG_LEVEL/LOG_FORMAT

    Raises:
        RatingSystemNotFoundError: If an active system is not registered
    """
    from dotenv import load_dotenv

    from api.pics_middleware import setup_pics_labels
    from monitoring import configure_logging, get_logger, setup_request_logging
    from rating_systems import get_active_rating_systems

    load_dotenv()

    if configure_logs:
        configure_logging(level=os.getenv("LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.json.sort_keys = False

    systems = get_active_rating_systems(active_systems)
    setup_request_logging(app)
    setup_pics_labels(app, systems)
    register_blueprints(app)

    get_logger(__name__).info("Active rating systems: %s", ", ".join(systems) or "none")
    return app


def run_server() -> None:
    """Run the Flask development server."""
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", 5000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    app = create_app()

    print(f"\n{'='*60}")
    print("PICS Content Rating Server")
    print(f"{'='*60}")
    print(f"Listening on: http://{host}:{port}")
    print(f"Rating systems: {', '.join(app.extensions['pics_rating_systems'])}")
    print(f"{'='*60}\n")

    app.run(host=host, port=port, debug=debug)
