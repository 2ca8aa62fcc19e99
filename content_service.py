"""
AI-backed content operations for the ESG Sunshine dashboard.

Every public function builds a prompt, calls Gemini through gemini_service
and interprets the answer. Failures never escape: a missing key, a transport
error or an unparseable answer all resolve to a fallback value of the same
type the success path returns.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, NamedTuple, Optional

import fallbacks
import gemini_service
import response_parser
from api import prompts
from api.pydantic_models import (
    BookGuideRequest, ChatContext, ChatReply, DiagnoseRequest, IntelligenceResult,
    Mission, RegenerativeLayer, ReportDraftRequest, Tag,
)
from dependencies import get_gemini_api_key
from gemini_service import InvocationFailure, ModelEnvelope
from response_parser import MalformedResponse

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    NO_CREDENTIAL = "NO_CREDENTIAL"
    INVOCATION_FAILURE = "INVOCATION_FAILURE"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"


class Outcome(NamedTuple):
    value: Any = None
    failure: Optional[FailureReason] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def attempt(operation: str, prompt: prompts.BuiltPrompt,
            interpret: Callable[[ModelEnvelope], Any]) -> Outcome:
    """Run one model call and report either the interpreted value or why it failed."""
    # Read on every call so a key added or removed at runtime takes effect
    api_key = get_gemini_api_key()
    if not api_key:
        logger.info(f"[{operation}] No Gemini API key configured, returning fallback.")
        return Outcome(failure=FailureReason.NO_CREDENTIAL)

    try:
        envelope = gemini_service.generate_content(api_key, prompt)
    except InvocationFailure as e:
        logger.warning(f"[{operation}] Gemini invocation failed: {e}")
        return Outcome(failure=FailureReason.INVOCATION_FAILURE)

    try:
        return Outcome(value=interpret(envelope))
    except MalformedResponse as e:
        # Raw model text is intentionally not logged
        logger.warning(f"[{operation}] Malformed model response: {e}")
        return Outcome(failure=FailureReason.MALFORMED_RESPONSE)


def resolve(outcome: Outcome, on_missing_key: Callable[[], Any], on_failure: Callable[[], Any]):
    if outcome.ok:
        return outcome.value
    if outcome.failure is FailureReason.NO_CREDENTIAL:
        return on_missing_key()
    return on_failure()


# --- Operations ---

def generate_health_diagnosis(metrics: DiagnoseRequest) -> str:
    outcome = attempt(
        "diagnose",
        prompts.build_health_diagnosis_prompt(metrics),
        lambda env: response_parser.interpret_text(env, fallbacks.DIAGNOSIS_FAILED_MESSAGE),
    )
    return resolve(outcome, lambda: fallbacks.NO_API_KEY_MESSAGE,
                   lambda: fallbacks.DIAGNOSIS_FAILED_MESSAGE)


def generate_book_guide(book: BookGuideRequest) -> str:
    outcome = attempt(
        "book_guide",
        prompts.build_book_guide_prompt(book),
        lambda env: response_parser.interpret_text(env, fallbacks.BOOK_GUIDE_FAILED_MESSAGE),
    )
    return resolve(outcome, lambda: fallbacks.NO_API_KEY_MESSAGE,
                   lambda: fallbacks.BOOK_GUIDE_FAILED_MESSAGE)


def generate_daily_missions(level: int) -> List[Mission]:
    outcome = attempt(
        "daily_missions",
        prompts.build_daily_missions_prompt(level),
        response_parser.interpret_missions,
    )
    return resolve(outcome, fallbacks.starter_missions, list)


def generate_tags(content: str, existing_tags: List[Tag]) -> List[Tag]:
    """Suggest tags for content. Matching against the existing pool is left to the caller."""
    outcome = attempt(
        "tag_suggestion",
        prompts.build_tag_suggestion_prompt(content, existing_tags),
        response_parser.interpret_tags,
    )
    return resolve(outcome, fallbacks.default_tags, list)


def chat_with_junai(message: str, context: ChatContext) -> ChatReply:
    outcome = attempt(
        "chat",
        prompts.build_chat_prompt(message, context),
        lambda env: response_parser.interpret_chat(env, fallbacks.CHAT_EMPTY_TEXT),
    )
    return resolve(outcome,
                   lambda: fallbacks.chat_reply(fallbacks.NO_API_KEY_MESSAGE),
                   lambda: fallbacks.chat_reply(fallbacks.CHAT_CONNECTION_ERROR))


def generate_esg_report(params: ReportDraftRequest) -> str:
    outcome = attempt(
        "report_draft",
        prompts.build_esg_report_prompt(params),
        lambda env: response_parser.interpret_text(env, fallbacks.REPORT_FAILED_MESSAGE),
    )
    return resolve(outcome, lambda: fallbacks.NO_API_KEY_MESSAGE,
                   lambda: fallbacks.REPORT_FAILED_MESSAGE)


def refine_esg_report(report: str, instruction: str) -> str:
    """Return a full rewritten report, or the original text when nothing could be refined."""
    if not instruction or not instruction.strip():
        return report
    outcome = attempt(
        "report_refine",
        prompts.build_refine_report_prompt(report, instruction),
        lambda env: response_parser.interpret_text(env, report),
    )
    return resolve(outcome, lambda: report, lambda: report)


def generate_intelligence_analysis(topic: str) -> IntelligenceResult:
    outcome = attempt(
        "intelligence_analysis",
        prompts.build_intelligence_prompt(topic),
        lambda env: response_parser.interpret_intelligence(env, topic),
    )
    return resolve(outcome,
                   lambda: fallbacks.intelligence_result(topic, fallbacks.INTELLIGENCE_NO_KEY_INSIGHT),
                   lambda: fallbacks.intelligence_result(topic, fallbacks.INTELLIGENCE_ERROR_INSIGHT))


def generate_regenerative_analysis(context: str) -> List[RegenerativeLayer]:
    outcome = attempt(
        "regenerative_analysis",
        prompts.build_regenerative_prompt(context),
        response_parser.interpret_regenerative_layers,
    )
    return resolve(outcome, list, list)


# --- Tagged dispatch ---

OPERATION_HANDLERS = {
    "diagnose": generate_health_diagnosis,
    "book_guide": generate_book_guide,
    "daily_missions": lambda req: generate_daily_missions(req.level),
    "tag_suggestion": lambda req: generate_tags(req.content, req.existingTags),
    "chat": lambda req: chat_with_junai(req.message, req.context),
    "report_draft": generate_esg_report,
    "report_refine": lambda req: refine_esg_report(req.report, req.instruction),
    "intelligence_analysis": lambda req: generate_intelligence_analysis(req.topic),
    "regenerative_analysis": lambda req: generate_regenerative_analysis(req.context),
}


def run_operation(request):
    """Dispatch any validated OperationRequest variant to its operation."""
    return OPERATION_HANDLERS[request.kind](request)
