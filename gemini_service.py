import logging
from typing import Any, Dict, List, Optional
from google import genai
from google.genai import types
from pydantic import BaseModel

from api.prompts import BuiltPrompt, Capability
from api.pydantic_models import SECTION_IDS
from dependencies import get_gemini_model

logger = logging.getLogger(__name__)

NAVIGATION_FUNCTION_NAME = Capability.NAVIGATION.value

navigation_tool = types.FunctionDeclaration(
    name=NAVIGATION_FUNCTION_NAME,
    description="Navigate the user to a specific section (tab) of the application.",
    parameters=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "sectionId": types.Schema(type=types.Type.STRING, enum=list(SECTION_IDS)),
        },
        required=["sectionId"],
    ),
)


class InvocationFailure(Exception):
    """Raised for any transport-level failure talking to Gemini (network, auth, quota, SDK errors)."""


class FunctionCallRecord(BaseModel):
    name: str
    args: Dict[str, Any] = {}


class GroundingChunk(BaseModel):
    title: Optional[str] = None
    uri: Optional[str] = None


class ModelEnvelope(BaseModel):
    """Raw pieces of a Gemini response, before any interpretation."""
    text: str = ""
    text_parts: List[str] = []
    grounding_chunks: List[GroundingChunk] = []
    function_calls: List[FunctionCallRecord] = []


def build_tools(capabilities) -> List[types.Tool]:
    tools = []
    if Capability.WEB_SEARCH in capabilities:
        tools.append(types.Tool(google_search=types.GoogleSearch()))
    if Capability.NAVIGATION in capabilities:
        tools.append(types.Tool(function_declarations=[navigation_tool]))
    return tools


def build_config(prompt: BuiltPrompt) -> Optional[types.GenerateContentConfig]:
    config_kwargs = {}
    tools = build_tools(prompt.capabilities)
    if tools:
        config_kwargs["tools"] = tools
    if prompt.json_output:
        # Gemini rejects a JSON mime type combined with tools; the parser strips fences instead.
        if tools:
            logger.debug("Skipping JSON response mime type because tools are declared.")
        else:
            config_kwargs["response_mime_type"] = "application/json"
    if not config_kwargs:
        return None
    return types.GenerateContentConfig(**config_kwargs)


def to_envelope(response: types.GenerateContentResponse) -> ModelEnvelope:
    candidates = response.candidates or []
    first = candidates[0] if candidates else None

    parts = []
    if first is not None and first.content is not None:
        parts = first.content.parts or []
    # Thought parts are model reasoning, not answer text
    text_parts = [p.text for p in parts if p.text and not p.thought]

    chunks = []
    metadata = first.grounding_metadata if first is not None else None
    if metadata is not None:
        for chunk in metadata.grounding_chunks or []:
            web = chunk.web
            chunks.append(GroundingChunk(
                title=web.title if web else None,
                uri=web.uri if web else None,
            ))

    calls = [
        FunctionCallRecord(name=fc.name or "", args=dict(fc.args or {}))
        for fc in response.function_calls or []
    ]

    return ModelEnvelope(
        text="".join(text_parts),
        text_parts=text_parts,
        grounding_chunks=chunks,
        function_calls=calls,
    )


def generate_content(api_key: str, prompt: BuiltPrompt) -> ModelEnvelope:
    """
    Send a built prompt to Gemini and return the raw response envelope.
    Timeouts are left to the SDK transport. Any failure is re-raised as InvocationFailure.
    """
    model_id = get_gemini_model()
    try:
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=model_id,
            contents=prompt.text,
            config=build_config(prompt),
        )
        envelope = to_envelope(response)
    except Exception as e:
        logger.error(f"Error calling Gemini model '{model_id}': {type(e).__name__} - {e}")
        raise InvocationFailure(str(e)) from e

    logger.info(
        f"Gemini response received: {len(envelope.text)} chars, "
        f"{len(envelope.grounding_chunks)} grounding chunk(s), {len(envelope.function_calls)} function call(s)"
    )
    return envelope
