"""HTTP entrypoint exposing the scrape and analyze operations."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from flask import Flask, jsonify, request

from maps_leads import service
from maps_leads.core.config import get_settings
from maps_leads.core.errors import ClientInputError, CollaboratorError
from maps_leads.etl.aggregate import FilterConfig

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "port_config": settings.port,
                "stagnation_mode": settings.stagnation_mode,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/api/scrape")
def scrape() -> Any:
    """
    Scrape Maps listings for a query and return enriched, filtered businesses.
    Required JSON fields: query
    Optional: limit (int, default 100), filters (object)
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "request body must be a JSON object"}), 400

    try:
        filters = FilterConfig.from_dict(payload.get("filters"))
        result = service.scrape(
            payload.get("query"),
            payload.get("limit", service.DEFAULT_LIMIT),
            filters,
        )
    except ClientInputError as exc:
        return jsonify({"error": str(exc)}), 400
    except CollaboratorError as exc:
        logger.exception("Scrape failed for %s: %s", payload.get("query"), exc)
        return jsonify({"error": str(exc)}), 500
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected scrape failure for %s: %s", payload.get("query"), exc)
        return jsonify({"error": f"scrape failed: {exc}"}), 500

    return jsonify(result), 200


@app.post("/api/analyze")
def analyze() -> Any:
    """Analyze previously scraped businesses. Required JSON field: businesses (list)."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "businesses must be a list"}), 400

    try:
        analysis = service.analyze(payload.get("businesses"))
    except ClientInputError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({"analysis": analysis}), 200


def main() -> None:
    port = int(os.getenv("PORT") or get_settings().port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
