# Overview: Flask API routes for liveness and readiness checks.

# backend/stockroom/routes/system.py
"""
System health endpoints.

- GET /api/health: liveness, always 200 while the process serves requests
- GET /api/health/db: readiness, 200 when both the raw pool and the ORM
  session answer, 503 otherwise, 500 when the check itself fails
"""

from flask import Blueprint, current_app, jsonify

from ..extensions import gateway
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


@system_bp.get("/api/health")
def health():
    return jsonify({"status": "ok", "timestamp": to_utc_z(utcnow())}), 200


@system_bp.get("/api/health/db")
def health_db():
    try:
        report = gateway.health_check()
    except Exception:
        current_app.logger.exception("Health check failed")
        return jsonify({
            "status": "error",
            "message": "Health check failed",
            "timestamp": to_utc_z(utcnow()),
        }), 500

    healthy = report["connection"] and report["orm"]
    return jsonify({
        "status": "healthy" if healthy else "unhealthy",
        "database": report,
        "timestamp": report["timestamp"],
    }), 200 if healthy else 503
