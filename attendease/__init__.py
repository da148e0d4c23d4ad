"""
__init__.py – AttendEase Studio Backend
────────────────────────────────────────────────────────────
Initialises the Flask app and registers all feature blueprints.

✅ Includes:
 • data_router     → health, whole-document GET/POST, sync retry
 • auth_router     → login + password reset
 • classes_router  → sessions, rosters, attendance toggle
 • store_router    → credit packages, purchases, trainee history
 • users_router    → user admin + bookings report
────────────────────────────────────────────────────────────
"""

import logging
from flask import Flask

from .config import LOG_LEVEL


# ─────────────────────────────────────────────────────────────
# Flask App Factory
# ─────────────────────────────────────────────────────────────
def create_app(store=None, studio=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # ── Configure logging ───────────────────────────────
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # ── Live state ──────────────────────────────────────
    from .storage import make_store
    from .studio import StudioService

    if studio is None:
        studio = StudioService(store or make_store())
    app.extensions["studio"] = studio

    # ── Register Blueprints ─────────────────────────────
    from .data_router import bp as data_bp
    from .auth_router import bp as auth_bp
    from .classes_router import bp as classes_bp
    from .store_router import bp as store_bp
    from .users_router import bp as users_bp

    app.register_blueprint(data_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(classes_bp)
    app.register_blueprint(store_bp)
    app.register_blueprint(users_bp)

    logging.getLogger(__name__).info(f"[APP] started with {type(studio.store).__name__}")
    return app
