# backend/rentpos/routes/system.py
"""
System health endpoint.

Checks the store is reachable and reports catalog and session counts so a
terminal can tell "server down" from "database down".
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Employee, Product, RentalProduct, SessionToken
from rentpos.time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_database_health() -> dict:
    """
    Check database connectivity and basic catalog queries.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
        rental_product_count = db.session.query(RentalProduct).count()
        employee_count = db.session.query(Employee).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "products": product_count,
                "rental_products": rental_product_count,
                "employees": employee_count,
            }
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_session_service_health() -> dict:
    """
    Check the session table is queryable.

    Degraded (not unhealthy) when no employee exists yet: nobody can log in
    until `flask system init` or `flask employees create` has run.
    """
    start_time = time.time()
    try:
        open_sessions = db.session.query(SessionToken).filter(SessionToken.revoked_at.is_(None)).count()
        has_employees = db.session.query(Employee.id).first() is not None
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy" if has_employees else "degraded",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"open_sessions": open_sessions},
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Session service health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Session service error"
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: healthy or degraded
    - 503: database or session store unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    session_health = check_session_service_health()

    all_checks = [database_health, session_health]
    if any(check["status"] == "unhealthy" for check in all_checks):
        overall_status, http_status = "unhealthy", 503
    elif any(check["status"] == "degraded" for check in all_checks):
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    return {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {
            "database": database_health,
            "session_service": session_health,
        }
    }, http_status
