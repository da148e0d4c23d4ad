#wsgi.py
"""
wsgi.py – AttendEase Entry Point
────────────────────────────────────────────
Used by Gunicorn:  gunicorn wsgi:app
────────────────────────────────────────────
"""

from attendease import create_app
from attendease.config import PORT

# Flask application factory
app = create_app()

if __name__ == "__main__":
    print(f"🚀 Starting AttendEase on port {PORT}")
    app.run(host="0.0.0.0", port=PORT)
