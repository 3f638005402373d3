#!/usr/bin/env python3
"""Flask API that exposes kettlebell video analysis."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import MethodNotAllowed, RequestEntityTooLarge

from agents.kettlebell_vbt_agent import KettlebellVBTAgent
from analysis.errors import AnalysisError


# base64 inflates the 100MB video limit by about a third
MAX_REQUEST_BYTES = 150 * 1024 * 1024


def create_app(agent: Optional[KettlebellVBTAgent] = None,
               config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_REQUEST_BYTES
    if config:
        app.config.update(config)

    CORS(app,
         origins=os.getenv("CORS_ORIGIN", "*"),
         methods=["GET", "POST", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization"])

    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=["200 per day", "50 per hour"],
        storage_uri="memory://",
    )
    # Flask-Limiter only holds a weak reference to itself once attached
    app.extensions["kettlebell_limiter"] = limiter

    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("kettlebell_api")

    vbt_agent: Optional[KettlebellVBTAgent] = agent

    def get_agent() -> KettlebellVBTAgent:
        nonlocal vbt_agent
        if vbt_agent is None:
            vbt_agent = KettlebellVBTAgent()
            logger.info("Kettlebell VBT agent initialised")
        return vbt_agent

    @app.errorhandler(MethodNotAllowed)
    def method_not_allowed(exc: MethodNotAllowed) -> tuple:
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(RequestEntityTooLarge)
    def request_too_large(exc: RequestEntityTooLarge) -> tuple:
        return jsonify({"error": "Request too large", "message": "Video file must be under 100MB"}), 413

    @app.route("/health", methods=["GET"])
    def health_check() -> Dict[str, str]:
        return {
            "status": "healthy",
            "service": "kettlebell-vbt-api",
        }

    @app.route("/api/analyze", methods=["POST"])
    @limiter.limit("10 per hour")  # Gemini video calls are the main cost driver
    def analyze() -> tuple:
        """Analyze a base64 video against its training protocol."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}
        video = payload.get("video")
        mime_type = payload.get("mimeType")
        protocol = payload.get("protocol")

        if not video or not protocol:
            return jsonify({
                "error": "Missing video or protocol data",
                "message": "Request body must include video and protocol",
            }), 400

        try:
            result = get_agent().analyze(video, mime_type, protocol)
        except AnalysisError as exc:
            if exc.status_code >= 500:
                logger.error("Analysis failed: %s", exc.message)
            return jsonify(exc.to_dict()), exc.status_code
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to analyze video")
            return jsonify({"error": "Analysis failed", "message": str(exc)}), 500

        return jsonify(result), 200

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.getenv("BACKEND_PORT", 5000))
    app.run(host="0.0.0.0", port=port)
