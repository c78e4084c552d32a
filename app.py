# app.py
from __future__ import annotations

import os
import logging
from typing import List, Optional

from flask import Flask, abort, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

from emissions import MODES, EmissionEngine, InvalidAmountError, InvalidDistanceError, InvalidModeError
from formatting import MODE_DISPLAY, comparison_rows, format_currency, format_number
from route_table import RouteTable, default_table
from trip import RouteNotFoundError, TripValidationError, calculate_trip

# ──────────────────────────────────────────────────────────────────────────────
# Load .env for local development (no effect in production)
# ──────────────────────────────────────────────────────────────────────────────
from dotenv import load_dotenv

load_dotenv()

# ──────────────────────────────────────────────────────────────────────────────
# Sentry setup
# ──────────────────────────────────────────────────────────────────────────────
SENTRY_DSN = os.getenv("SENTRY_DSN", "")
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[FlaskIntegration()],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        send_default_pii=False,
    )

# ──────────────────────────────────────────────────────────────────────────────
# Config & logging
# ──────────────────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL)
log = logging.getLogger("co2calc")

FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "")
API_KEY = os.getenv("API_KEY", "")

DEFAULT_LIMITS = os.getenv("DEFAULT_LIMITS", "200 per minute")
LIMITER_STORAGE_URI = os.getenv("LIMITER_STORAGE_URI", "memory://")


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────
def require_key() -> None:
    # Open service unless an API key is configured
    if API_KEY and request.headers.get("x-api-key") != API_KEY:
        abort(401, description="Unauthorized")


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="JSON object body required")
    return data


def _number(data: dict, key: str) -> float:
    value = data.get(key)
    if isinstance(value, bool) or value is None:
        abort(400, description=f"{key} required")
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        abort(400, description=f"{key} must be a number")


def _credits_view(credits: float, price: dict) -> dict:
    return {
        "credits": credits,
        "price": price,
        "kg_per_credit": current_app.config["ENGINE"].credit.kg_per_credit,
        "formatted": {
            "credits": format_number(credits, 4),
            "min": format_currency(price["min"]),
            "max": format_currency(price["max"]),
            "average": format_currency(price["average"]),
        },
    }


# ──────────────────────────────────────────────────────────────────────────────
# Flask app setup
# ──────────────────────────────────────────────────────────────────────────────
def create_app(
    engine: Optional[EmissionEngine] = None,
    routes: Optional[RouteTable] = None,
) -> Flask:
    flask_app = Flask(__name__)
    flask_app.wsgi_app = ProxyFix(flask_app.wsgi_app, x_for=1, x_proto=1, x_port=1, x_prefix=1)
    flask_app.config["ENGINE"] = engine or EmissionEngine()
    flask_app.config["ROUTES"] = routes or default_table()

    cors_origins: List[str] = [FRONTEND_ORIGIN] if FRONTEND_ORIGIN else ["*"]
    CORS(flask_app, resources={r"/api/*": {"origins": cors_origins}}, supports_credentials=False)

    # Optional rate limiter
    if DEFAULT_LIMITS:
        try:
            from flask_limiter import Limiter
            from flask_limiter.util import get_remote_address

            Limiter(
                key_func=get_remote_address,
                app=flask_app,
                default_limits=[DEFAULT_LIMITS],
                storage_uri=LIMITER_STORAGE_URI,
            )
            log.info("Rate limiting enabled with %s via %s", DEFAULT_LIMITS, LIMITER_STORAGE_URI)
        except Exception as e:
            log.warning("Rate limiting not enabled (%s). Continuing without limiter.", e)

    _register(flask_app)
    log.info("CO2 calculator ready: %d routes, modes=%s", len(flask_app.config["ROUTES"]), ",".join(MODES))
    return flask_app


def _register(app: Flask) -> None:
    engine: EmissionEngine = app.config["ENGINE"]
    routes: RouteTable = app.config["ROUTES"]

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    # ──────────────────────────────────────────────────────────────────────────
    # Health / diagnostics
    # ──────────────────────────────────────────────────────────────────────────
    @app.get("/")
    def root():
        return jsonify({
            "name": "CO2 Trip Calculator API",
            "version": "v1",
            "health": "/health",
            "routes": "/_routes",
        }), 200

    @app.get("/health")
    def health_root():
        return jsonify({"status": "ok"}), 200

    @app.get("/api/v1/health")
    def health_v1():
        return health_root()

    # ──────────────────────────────────────────────────────────────────────────
    # Route lookup
    # ──────────────────────────────────────────────────────────────────────────
    @app.get("/api/v1/cities")
    def list_cities():
        cities = routes.list_cities()
        return jsonify({"count": len(cities), "cities": cities}), 200

    @app.get("/api/v1/distance")
    def find_distance():
        origin = request.args.get("origin", "")
        destination = request.args.get("destination", "")
        km = routes.find_distance(origin, destination)
        if km is None:
            return jsonify({
                "found": False,
                "distance_km": None,
                "message": "Route not found in database. Please enter distance manually or check spelling.",
            }), 200
        return jsonify({
            "found": True,
            "distance_km": km,
            "message": f"Distance found: {km} km",
        }), 200

    # ──────────────────────────────────────────────────────────────────────────
    # Emission engine
    # ──────────────────────────────────────────────────────────────────────────
    @app.get("/api/v1/modes")
    def list_modes():
        factors = engine.factors
        return jsonify([
            {"mode": m, "factor_kg_per_km": factors[m], **MODE_DISPLAY[m]} for m in MODES
        ]), 200

    @app.post("/api/v1/emissions")
    def emissions():
        data = _payload()
        km = _number(data, "distance_km")
        try:
            est = engine.estimate(km, data.get("mode"))
        except (InvalidModeError, InvalidDistanceError) as e:
            abort(400, description=str(e))
        return jsonify(est), 200

    @app.post("/api/v1/compare")
    def compare():
        data = _payload()
        km = _number(data, "distance_km")
        try:
            comparison = engine.all_modes(km)
        except InvalidDistanceError as e:
            abort(400, description=str(e))
        return jsonify({
            "distance_km": km,
            "results": comparison_rows(comparison, data.get("selected")),
        }), 200

    @app.post("/api/v1/credits")
    def credits():
        data = _payload()
        kg = _number(data, "emission_kg")
        try:
            n = engine.carbon_credits(kg)
            price = engine.credit_price(n)
        except InvalidAmountError as e:
            abort(400, description=str(e))
        return jsonify({"emission_kg": kg, **_credits_view(n, price)}), 200

    # ──────────────────────────────────────────────────────────────────────────
    # Full trip calculation
    # ──────────────────────────────────────────────────────────────────────────
    @app.post("/api/v1/calculate")
    def calculate():
        """
        Run the whole calculator for one trip.

        Body: { origin, destination, mode, distance_km? }. Without
        distance_km the route table supplies the distance.
        """
        require_key()
        data = _payload()
        try:
            report = calculate_trip(
                engine,
                routes,
                origin=data.get("origin"),
                destination=data.get("destination"),
                mode=data.get("mode"),
                distance_km=data.get("distance_km"),
            )
        except RouteNotFoundError as e:
            abort(422, description=str(e))
        except (TripValidationError, InvalidDistanceError, InvalidAmountError) as e:
            abort(400, description=str(e))

        mode = report["mode"]
        saved = report["savings"]
        return jsonify({
            **report,
            "display": {
                **MODE_DISPLAY[mode],
                "distance": f"{format_number(report['distance_km'], 0)} km",
                "emission": f"{format_number(report['emission_kg'])} kg",
                "savings": (
                    f"Saved {format_number(saved['saved_kg'])} kg vs car ({saved['percentage']}%)"
                    if saved["saved_kg"] > 0 else None
                ),
            },
            "comparison": comparison_rows(report["comparison"], mode),
            "carbon_credits": _credits_view(report["credits"], report["price"]),
        }), 200

    # ──────────────────────────────────────────────────────────────────────────
    # Routes list
    # ──────────────────────────────────────────────────────────────────────────
    @app.get("/_routes")
    def list_routes():
        rules = []
        for r in app.url_map.iter_rules():
            methods = ",".join(sorted(r.methods - {"HEAD", "OPTIONS"}))
            rules.append({"rule": str(r), "endpoint": r.endpoint, "methods": methods})
        rules.sort(key=lambda x: x["rule"])
        return jsonify(rules), 200


app = create_app()

# ──────────────────────────────────────────────────────────────────────────────
# Entrypoint
# ──────────────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
