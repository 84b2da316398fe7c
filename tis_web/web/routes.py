from __future__ import annotations

import time

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException, MethodNotAllowed, RequestEntityTooLarge

from tis_web.domain.errors import AnalysisError, ValidationError
from tis_web.services.analysis_service import AnalysisService
from tis_web.services.input_normalization import parse_input


def create_blueprint(analysis_service: AnalysisService, provider_name: str) -> Blueprint:
    bp = Blueprint("api", __name__, url_prefix="/api")

    @bp.get("/health")
    def health():
        return jsonify({"status": "ok", "provider": provider_name})

    @bp.post("/analyze")
    def analyze():
        started = time.monotonic()
        kind = "?"
        try:
            body = request.get_json(silent=True)
            if not isinstance(body, dict):
                raise ValidationError("Request body must be a JSON object.")

            analysis_input = parse_input(body.get("input"))
            kind = analysis_input.kind
            result = analysis_service.run(analysis_input)
        except AnalysisError as e:
            current_app.logger.info(
                "Analysis (%s) failed status=%s in %.2fs: %s",
                kind, e.http_status, time.monotonic() - started, e.public_message(),
            )
            return jsonify(e.to_payload()), e.http_status
        except HTTPException:
            raise
        except Exception as e:
            current_app.logger.exception("Analysis (%s) crashed", kind)
            return jsonify({"error": str(e)}), 500

        current_app.logger.info(
            "Analysis (%s) ok company=%r score=%s verdict=%s in %.2fs",
            kind, result.company_name, result.risk_score, result.verdict.value, time.monotonic() - started,
        )
        return jsonify(result.to_dict()), 200

    @bp.app_errorhandler(MethodNotAllowed)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @bp.app_errorhandler(RequestEntityTooLarge)
    def too_large(e):
        return jsonify({"error": "Uploaded document is too large."}), 413

    return bp
