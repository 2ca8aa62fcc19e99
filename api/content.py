import logging
from functools import wraps
from flask import Blueprint, request, jsonify
from pydantic import BaseModel, ValidationError

import content_service
import integrations
from .pydantic_models import (
    BookGuideRequest, ChatRequest, DailyMissionsRequest, DiagnoseRequest,
    IntelligenceRequest, RegenerativeRequest, ReportDraftRequest, ReportRefineRequest,
    TagSuggestionRequest, operation_request_adapter,
)
from .error_utils import bad_request_error, handle_exception, validation_error

content_bp = Blueprint('content_bp', __name__)


def validated_body(validate):
    """Validates the JSON body with `validate` and passes the result as the first argument."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                return bad_request_error("Request body must be a JSON object")
            try:
                req_data = validate(payload)
            except ValidationError as e:
                return validation_error(details=e.errors(include_url=False, include_context=False, include_input=False))
            return f(req_data, *args, **kwargs)
        return wrapper
    return decorator


def _dump(result):
    if isinstance(result, BaseModel):
        return result.model_dump(exclude_none=True)
    if isinstance(result, list):
        return [_dump(item) for item in result]
    return result


@content_bp.route('/ai/diagnosis', methods=['POST'])
@validated_body(DiagnoseRequest.model_validate)
def health_diagnosis(req_data):
    try:
        return jsonify({"diagnosis": content_service.generate_health_diagnosis(req_data)}), 200
    except Exception as e:
        return handle_exception(e, "health_diagnosis endpoint")

@content_bp.route('/ai/book-guide', methods=['POST'])
@validated_body(BookGuideRequest.model_validate)
def book_guide(req_data):
    try:
        return jsonify({"guide": content_service.generate_book_guide(req_data)}), 200
    except Exception as e:
        return handle_exception(e, "book_guide endpoint")

@content_bp.route('/ai/missions', methods=['POST'])
@validated_body(DailyMissionsRequest.model_validate)
def daily_missions(req_data):
    try:
        missions = content_service.generate_daily_missions(req_data.level)
        return jsonify({"missions": _dump(missions)}), 200
    except Exception as e:
        return handle_exception(e, "daily_missions endpoint")

@content_bp.route('/ai/tags', methods=['POST'])
@validated_body(TagSuggestionRequest.model_validate)
def suggest_tags(req_data):
    try:
        tags = content_service.generate_tags(req_data.content, req_data.existingTags)
        return jsonify({"tags": _dump(tags)}), 200
    except Exception as e:
        return handle_exception(e, "suggest_tags endpoint")

@content_bp.route('/ai/chat', methods=['POST'])
@validated_body(ChatRequest.model_validate)
def chat(req_data):
    try:
        reply = content_service.chat_with_junai(req_data.message, req_data.context)
        return jsonify(_dump(reply)), 200
    except Exception as e:
        return handle_exception(e, "chat endpoint")

@content_bp.route('/ai/report', methods=['POST'])
@validated_body(ReportDraftRequest.model_validate)
def report_draft(req_data):
    try:
        return jsonify({"report": content_service.generate_esg_report(req_data)}), 200
    except Exception as e:
        return handle_exception(e, "report_draft endpoint")

@content_bp.route('/ai/report/refine', methods=['POST'])
@validated_body(ReportRefineRequest.model_validate)
def report_refine(req_data):
    try:
        report = content_service.refine_esg_report(req_data.report, req_data.instruction)
        return jsonify({"report": report}), 200
    except Exception as e:
        return handle_exception(e, "report_refine endpoint")

@content_bp.route('/ai/intelligence', methods=['POST'])
@validated_body(IntelligenceRequest.model_validate)
def intelligence_analysis(req_data):
    try:
        result = content_service.generate_intelligence_analysis(req_data.topic)
        return jsonify(_dump(result)), 200
    except Exception as e:
        return handle_exception(e, "intelligence_analysis endpoint")

@content_bp.route('/ai/regenerative', methods=['POST'])
@validated_body(RegenerativeRequest.model_validate)
def regenerative_analysis(req_data):
    try:
        layers = content_service.generate_regenerative_analysis(req_data.context)
        return jsonify({"layers": _dump(layers)}), 200
    except Exception as e:
        return handle_exception(e, "regenerative_analysis endpoint")

@content_bp.route('/ai/operations', methods=['POST'])
@validated_body(operation_request_adapter.validate_python)
def run_operation(req_data):
    """Single entry point accepting any operation request tagged by `kind`."""
    try:
        logging.info(f"Dispatching '{req_data.kind}' operation")
        result = content_service.run_operation(req_data)
        return jsonify({"kind": req_data.kind, "result": _dump(result)}), 200
    except Exception as e:
        return handle_exception(e, "run_operation endpoint")

# --- Mock integrations ---

@content_bp.route('/integrations/flowlu/projects', methods=['GET'])
def flowlu_projects():
    summary = integrations.fetch_flowlu_projects(request.args.get('apiKey'))
    return jsonify({"summary": summary}), 200

@content_bp.route('/integrations/bluecc/data', methods=['GET'])
def bluecc_data():
    snapshot = integrations.fetch_bluecc_data(request.args.get('apiKey'))
    return jsonify(snapshot.model_dump()), 200
