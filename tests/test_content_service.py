"""Tests for the content operations: success paths and every fallback branch."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

import content_service
import fallbacks
import response_parser
from api.prompts import BuiltPrompt
from api.pydantic_models import (
    BookGuideRequest, ChatContext, DiagnoseRequest, ReportDraftRequest, Tag,
    operation_request_adapter,
)
from content_service import FailureReason
from gemini_service import FunctionCallRecord, GroundingChunk, InvocationFailure, ModelEnvelope

STAKEHOLDER_AXES = ("government", "ngo", "investors", "supplyChain", "consumers")


# --- No credential ---

@pytest.mark.parametrize("e,s,g", [(0, 0, 0), (100, 100, 100), (80, 40, 60), (13, 57, 99)])
def test_diagnosis_without_key_returns_placeholder(e, s, g):
    result = content_service.generate_health_diagnosis(DiagnoseRequest(e=e, s=s, g=g))
    assert result == fallbacks.NO_API_KEY_MESSAGE
    assert result


def test_no_key_never_calls_model():
    with patch("gemini_service.generate_content") as mock_generate:
        content_service.generate_health_diagnosis(DiagnoseRequest(e=80, s=40, g=60))
        content_service.chat_with_junai("hi", ChatContext())
        content_service.generate_intelligence_analysis("CBAM")
    mock_generate.assert_not_called()


def test_missions_without_key_are_starter_set():
    missions = content_service.generate_daily_missions(5)
    assert [m.title for m in missions] == [m["title"] for m in fallbacks.STARTER_MISSIONS]
    assert len({m.id for m in missions}) == 3
    assert all(m.reward is not None and m.completed is False for m in missions)


def test_tags_without_key_get_fresh_ids():
    first = content_service.generate_tags("碳盤查", [])
    second = content_service.generate_tags("碳盤查", [])
    assert [t.name for t in first] == ["ESG"]
    assert first[0].id != second[0].id


def test_chat_without_key():
    reply = content_service.chat_with_junai("你好", ChatContext())
    assert reply.text == fallbacks.NO_API_KEY_MESSAGE
    assert reply.sources == []
    assert reply.action is None


def test_intelligence_without_key_is_zeroed():
    result = content_service.generate_intelligence_analysis("CBAM")
    assert result.topic == "CBAM"
    assert result.sentiment == 0
    for axis in STAKEHOLDER_AXES:
        assert getattr(result.stakeholders, axis) == 0
    assert len(result.insights) == 1
    assert result.tags == []


def test_report_and_regenerative_without_key():
    params = ReportDraftRequest(companyName="陽光科技")
    assert content_service.generate_esg_report(params) == fallbacks.NO_API_KEY_MESSAGE
    assert content_service.refine_esg_report("# 原稿", "更精簡") == "# 原稿"
    assert content_service.generate_regenerative_analysis("食品業") == []
    assert content_service.generate_book_guide(BookGuideRequest(title="Net Positive")) == fallbacks.NO_API_KEY_MESSAGE


def test_key_is_read_on_every_call(fake_model, monkeypatch):
    fake_model.return_value = ModelEnvelope(text="體質良好", text_parts=["體質良好"])
    metrics = DiagnoseRequest(e=80, s=40, g=60)
    assert content_service.generate_health_diagnosis(metrics) == "體質良好"

    monkeypatch.delenv("GEMINI_API_KEY")
    assert content_service.generate_health_diagnosis(metrics) == fallbacks.NO_API_KEY_MESSAGE
    assert fake_model.call_count == 1


def test_legacy_api_key_variable_is_accepted(monkeypatch):
    monkeypatch.setenv("API_KEY", "legacy-key")
    with patch("gemini_service.generate_content", return_value=ModelEnvelope(text="ok")) as mock_generate:
        assert content_service.generate_health_diagnosis(DiagnoseRequest(e=1, s=1, g=1)) == "ok"
    assert mock_generate.call_args.args[0] == "legacy-key"


# --- Success paths ---

def test_diagnosis_passes_text_through(fake_model):
    fake_model.return_value = ModelEnvelope(text="E 面表現佳，建議加強治理。")
    assert content_service.generate_health_diagnosis(DiagnoseRequest(e=80, s=40, g=60)) == "E 面表現佳，建議加強治理。"
    built = fake_model.call_args.args[1]
    assert isinstance(built, BuiltPrompt)
    assert "E:80, S:40, G:60" in built.text


def test_empty_text_becomes_fallback_string(fake_model):
    fake_model.return_value = ModelEnvelope(text="")
    assert content_service.generate_health_diagnosis(DiagnoseRequest(e=1, s=2, g=3)) == fallbacks.DIAGNOSIS_FAILED_MESSAGE
    assert content_service.generate_esg_report(ReportDraftRequest(companyName="X")) == fallbacks.REPORT_FAILED_MESSAGE
    assert content_service.chat_with_junai("hi", ChatContext()).text == fallbacks.CHAT_EMPTY_TEXT


def test_missions_from_fenced_json(fake_model):
    payload = [{"title": "植樹", "desc": "種一棵樹", "reward": 100, "id": "same"},
               {"title": "關燈", "desc": "午休關燈", "reward": 50, "id": "same"}]
    fake_model.return_value = ModelEnvelope(text=f"```json\n{json.dumps(payload, ensure_ascii=False)}\n```")
    missions = content_service.generate_daily_missions(5)
    assert [m.title for m in missions] == ["植樹", "關燈"]
    assert len({m.id for m in missions}) == 2
    assert all(m.completed is False for m in missions)


def test_tag_suggestions_are_not_deduplicated(fake_model):
    existing = [Tag(id="t1", name="ESG", color="bg-green-100 text-green-700")]
    fake_model.return_value = ModelEnvelope(text=json.dumps([
        {"name": "esg", "color": "bg-red-100 text-red-700"},
        {"name": "淨零", "color": "bg-emerald-100 text-emerald-700"},
    ], ensure_ascii=False))
    tags = content_service.generate_tags("淨零轉型", existing)
    assert [t.name for t in tags] == ["esg", "淨零"]
    assert "t1" not in {t.id for t in tags}
    assert len({t.id for t in tags}) == 2


def test_tag_suggestion_keeps_tags_missing_a_color(fake_model):
    fake_model.return_value = ModelEnvelope(text=json.dumps([
        {"name": "淨零", "color": "bg-green-100 text-green-700"},
        {"name": "治理"},
    ], ensure_ascii=False))
    tags = content_service.generate_tags("公司治理與淨零", [])
    assert [t.name for t in tags] == ["淨零", "治理"]
    assert tags[1].color is None


def test_chat_navigation_and_sources(fake_model):
    fake_model.return_value = ModelEnvelope(
        text="前往淨零頁面",
        text_parts=["前往淨零頁面"],
        grounding_chunks=[GroundingChunk(title="COP29", uri="https://unfccc.int/cop29")],
        function_calls=[FunctionCallRecord(name="navigate_to_section", args={"sectionId": "netzero"})],
    )
    reply = content_service.chat_with_junai("帶我去淨零", ChatContext(currentTab="dashboard"))
    assert reply.action.type == "NAVIGATE"
    assert reply.action.payload == {"tabId": "netzero"}
    assert reply.sources[0].uri == "https://unfccc.int/cop29"


def test_chat_with_out_of_range_section_has_no_action(fake_model):
    fake_model.return_value = ModelEnvelope(
        text_parts=["好的"],
        function_calls=[FunctionCallRecord(name="navigate_to_section", args={"sectionId": "admin"})],
    )
    reply = content_service.chat_with_junai("帶我去後台", ChatContext())
    assert reply.action is None
    assert reply.text == "好的"


def test_report_round_trip_with_empty_instruction(fake_model):
    fake_model.return_value = ModelEnvelope(text="# 陽光科技 ESG 報告\n\n## 環境")
    draft = content_service.generate_esg_report(ReportDraftRequest(companyName="陽光科技"))
    assert content_service.refine_esg_report(draft, "") == draft
    assert content_service.refine_esg_report(draft, "   ") == draft
    assert fake_model.call_count == 1


def test_refine_replaces_whole_report(fake_model):
    fake_model.return_value = ModelEnvelope(text="# 精簡版")
    assert content_service.refine_esg_report("# 原稿\n很長的內容", "更精簡") == "# 精簡版"


def test_intelligence_success_keeps_model_values(fake_model):
    fake_model.return_value = ModelEnvelope(text=json.dumps({
        "sentiment": 65,
        "stakeholders": {"government": 80, "ngo": 70, "investors": 60, "supplyChain": 40, "consumers": 30},
        "insights": ["歐盟碳關稅", "出口成本上升", "供應鏈盤查"],
    }, ensure_ascii=False))
    result = content_service.generate_intelligence_analysis("CBAM")
    assert result.sentiment == 65
    assert result.stakeholders.supplyChain == 40
    assert len(result.insights) == 3
    assert result.tags == []
    assert result.sources == []


def test_intelligence_keeps_search_citations(fake_model):
    fake_model.return_value = ModelEnvelope(
        text=json.dumps({"sentiment": 50}),
        grounding_chunks=[
            GroundingChunk(title="EU", uri="https://eu.example/cbam"),
            GroundingChunk(title="無網址"),
        ],
    )
    result = content_service.generate_intelligence_analysis("CBAM")
    assert [(s.title, s.uri) for s in result.sources] == [("EU", "https://eu.example/cbam")]


def test_regenerative_success(fake_model):
    fake_model.return_value = ModelEnvelope(text='[{"layer": "Learning", "score": 45, "analysis": "培訓不足"}]')
    layers = content_service.generate_regenerative_analysis("食品業")
    assert layers[0].layer == "Learning"
    assert layers[0].score == 45
    assert layers[0].id


# --- Failures ---

def test_invocation_failure_falls_back(fake_model):
    fake_model.side_effect = InvocationFailure("timeout")
    assert content_service.generate_health_diagnosis(DiagnoseRequest(e=1, s=1, g=1)) == fallbacks.DIAGNOSIS_FAILED_MESSAGE
    assert content_service.generate_daily_missions(3) == []
    assert content_service.generate_tags("x", []) == []
    assert content_service.chat_with_junai("hi", ChatContext()).text == fallbacks.CHAT_CONNECTION_ERROR
    assert content_service.refine_esg_report("# 原稿", "更精簡") == "# 原稿"
    assert content_service.generate_regenerative_analysis("x") == []

    result = content_service.generate_intelligence_analysis("CBAM")
    assert result.insights == [fallbacks.INTELLIGENCE_ERROR_INSIGHT]
    for axis in STAKEHOLDER_AXES:
        assert isinstance(getattr(result.stakeholders, axis), (int, float))


def test_malformed_json_falls_back(fake_model):
    fake_model.return_value = ModelEnvelope(text="抱歉，我無法提供 JSON。")
    assert content_service.generate_daily_missions(3) == []
    assert content_service.generate_regenerative_analysis("x") == []
    result = content_service.generate_intelligence_analysis("CBAM")
    assert result.sentiment == 0
    assert result.insights == [fallbacks.INTELLIGENCE_ERROR_INSIGHT]


def test_attempt_reports_failure_reason(fake_model):
    built = BuiltPrompt(text="x", json_output=True)
    fake_model.return_value = ModelEnvelope(text="not json")
    outcome = content_service.attempt("test", built, lambda env: response_parser.parse_json_payload(env.text, list))
    assert outcome.failure is FailureReason.MALFORMED_RESPONSE
    assert not outcome.ok

    fake_model.side_effect = InvocationFailure("down")
    assert content_service.attempt("test", built, lambda env: env).failure is FailureReason.INVOCATION_FAILURE


def test_attempt_without_key_reports_no_credential():
    outcome = content_service.attempt("test", BuiltPrompt(text="x"), lambda env: env)
    assert outcome.failure is FailureReason.NO_CREDENTIAL


# --- Tagged dispatch ---

def test_run_operation_dispatches_by_kind():
    request = operation_request_adapter.validate_python({"kind": "intelligence_analysis", "topic": "CBAM"})
    result = content_service.run_operation(request)
    assert result.topic == "CBAM"

    request = operation_request_adapter.validate_python({"kind": "report_refine", "report": "# 原稿", "instruction": ""})
    assert content_service.run_operation(request) == "# 原稿"


def test_every_operation_kind_has_a_handler():
    kinds = {
        "diagnose", "book_guide", "daily_missions", "tag_suggestion", "chat",
        "report_draft", "report_refine", "intelligence_analysis", "regenerative_analysis",
    }
    assert set(content_service.OPERATION_HANDLERS) == kinds
