"""
Interpretation of raw Gemini envelopes into typed results.
Anything that cannot be decoded into the expected shape raises
MalformedResponse; partial objects are passed through untouched.
"""

import json
import logging
import re
import uuid
from typing import List

from pydantic import ValidationError

from api.prompts import Capability
from api.pydantic_models import (
    AgentAction, ChatReply, GroundingSource, IntelligenceResult, Mission,
    RegenerativeLayer, SECTION_IDS, SuggestedTag,
)
from gemini_service import ModelEnvelope

logger = logging.getLogger(__name__)

# Matches ```json, ```JSON and bare ``` markers anywhere in the text
CODE_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


class MalformedResponse(Exception):
    """The model answered, but not in the shape the operation asked for."""


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_PATTERN.sub("", text or "").strip()


def parse_json_payload(text: str, expected_type: type):
    """
    Decode a JSON object or array from model text, tolerating markdown fences.
    Empty text decodes as an empty instance of expected_type.
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        return expected_type()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Response is not valid JSON: {e.msg} (line {e.lineno})") from e
    if not isinstance(data, expected_type):
        raise MalformedResponse(
            f"Expected a JSON {expected_type.__name__}, got {type(data).__name__}"
        )
    return data


def _validate(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedResponse(
            f"{model.__name__} failed validation with {e.error_count()} error(s)"
        ) from e


def _json_objects(text: str) -> List[dict]:
    items = parse_json_payload(text, list)
    for item in items:
        if not isinstance(item, dict):
            raise MalformedResponse(f"Expected array of objects, found {type(item).__name__}")
    return items


def interpret_text(envelope: ModelEnvelope, empty_text: str) -> str:
    return envelope.text or empty_text


def interpret_missions(envelope: ModelEnvelope) -> List[Mission]:
    # ids come from us, never from the model
    return [
        _validate(Mission, {**item, "id": new_id("ai"), "completed": False, "type": "daily"})
        for item in _json_objects(envelope.text)
    ]


def interpret_tags(envelope: ModelEnvelope) -> List[SuggestedTag]:
    return [_validate(SuggestedTag, {**item, "id": new_id("tag")}) for item in _json_objects(envelope.text)]


def interpret_regenerative_layers(envelope: ModelEnvelope) -> List[RegenerativeLayer]:
    return [
        _validate(RegenerativeLayer, {**item, "id": new_id("layer")})
        for item in _json_objects(envelope.text)
    ]


def interpret_intelligence(envelope: ModelEnvelope, topic: str) -> IntelligenceResult:
    data = parse_json_payload(envelope.text, dict)
    # topic is the caller's; tags are attached by the caller from a tag suggestion call
    data.pop("tags", None)
    data["topic"] = topic
    data["sources"] = extract_sources(envelope)
    return _validate(IntelligenceResult, data)


def extract_sources(envelope: ModelEnvelope) -> List[GroundingSource]:
    return [
        GroundingSource(title=chunk.title, uri=chunk.uri)
        for chunk in envelope.grounding_chunks
        if chunk.uri
    ]


def extract_action(envelope: ModelEnvelope):
    if not envelope.function_calls:
        return None
    call = envelope.function_calls[0]
    if call.name != Capability.NAVIGATION.value:
        logger.info(f"Ignoring unsupported function call '{call.name}'")
        return None
    section_id = call.args.get("sectionId")
    if section_id not in SECTION_IDS:
        logger.warning(f"Rejected navigation to unknown section '{section_id}'")
        return None
    return AgentAction(type="NAVIGATE", payload={"tabId": section_id})


def interpret_chat(envelope: ModelEnvelope, empty_text: str) -> ChatReply:
    text = envelope.text_parts[0] if envelope.text_parts else empty_text
    return ChatReply(
        text=text,
        sources=extract_sources(envelope),
        action=extract_action(envelope),
    )
