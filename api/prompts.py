"""
Prompt templates and builders for every AI-backed content operation.
Builders are pure: they only render text and declare which model
capabilities (web search, navigation function) the call needs.
"""

import re
from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel

from .pydantic_models import (
    BookGuideRequest, ChatContext, DiagnoseRequest, IntegrationConnection,
    REGENERATIVE_LAYER_NAMES, ReportDraftRequest, Tag,
)

# Only this many characters of free text are sent for tag suggestions
TAG_CONTENT_PREVIEW_CHARS = 150

_PLACEHOLDER = re.compile(r"\{(\w+_placeholder)\}")


class Capability(str, Enum):
    WEB_SEARCH = "web_search"
    NAVIGATION = "navigate_to_section"


class BuiltPrompt(BaseModel):
    text: str
    capabilities: Tuple[Capability, ...] = ()
    json_output: bool = False


HEALTH_DIAGNOSIS_PROMPT = "顧問角色：針對 E:{e_placeholder}, S:{s_placeholder}, G:{g_placeholder} 給出 100 字內的繁體中文策略診斷與再生建議。"

BOOK_GUIDE_PROMPT = """為書名《{title_placeholder}》（作者：{author_placeholder}）生成繁體中文導讀：1.核心理念 2.討論題綱 3.行動洞察。
書籍簡介：{description_placeholder}
Markdown 格式，200字內。"""

DAILY_MISSIONS_PROMPT = """為 Level {level_placeholder} 用戶生成 3 個 ESG 任務 (JSON)。
欄位: title, desc, reward (50-150)。
主題: 減碳, 社會, 治理。繁體中文。
格式: JSON 陣列 [{"title": "...", "desc": "...", "reward": 100}]。"""

TAG_SUGGESTION_PROMPT = """為內容生成 3 個標籤。
優先使用現有標籤: [{existing_placeholder}]。
若需新標籤，請創造並指定 Tailwind 顏色 (bg-*-100 text-*-700)。
格式: JSON 陣列 [{"name": "...", "color": "..."}]。
內容: "{content_placeholder}..." """

CHAT_PROMPT = """角色: JunAi，ESG Sunshine 萬能代理。
情境: {tab_placeholder}, 角色: {role_placeholder}。
記憶: {memory_placeholder}。
整合: {integrations_placeholder}。
工具: googleSearch (查新知), navigate_to_section (導航)。
語言: 繁體中文 (台灣)。
用戶: {message_placeholder}"""

ESG_REPORT_PROMPT = """撰寫 ESG 報告草稿。
公司: {company_placeholder}, 產業: {industry_placeholder}, 框架: {framework_placeholder}。
數據: {data_placeholder}。
章節: {sections_placeholder}。
標籤: {tags_placeholder}。
要求: 繁體中文 Markdown，專業語氣。"""

REFINE_REPORT_PROMPT = """優化此 ESG 報告片段，輸出完整的新版本全文。
指令: {instruction_placeholder}。
原文: {report_placeholder}
要求: 保持 Markdown，繁體中文。"""

INTELLIGENCE_PROMPT = """分析主題 "{topic_placeholder}" 的 ESG 趨勢。使用 googleSearch。
輸出 JSON: { sentiment(0-100), stakeholders:{government, ngo, investors, supplyChain, consumers}, insights: [3 strings] }。
各利害關係人分數為 0-100 的整數。只輸出 JSON。"""

REGENERATIVE_PROMPT = """分析 "{context_placeholder}" 的再生 ESG 模型 (JSON Array): [{layer, score, analysis}]。
layer 為以下之一: {layers_placeholder}。score 為 0-100 的整數，analysis 為繁體中文短評。"""

def _integration_status(name: str, connection: IntegrationConnection) -> str:
    return f"{name} {'已連線' if connection.connected else '未連線'}"


def fill_template(template: str, **values: str) -> str:
    """Substitutes every {name_placeholder} token in one pass.

    Values are inserted literally, so a value that itself contains a
    placeholder token is never substituted again.
    """
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)


def build_health_diagnosis_prompt(metrics: DiagnoseRequest) -> BuiltPrompt:
    text = fill_template(
        HEALTH_DIAGNOSIS_PROMPT,
        e_placeholder=str(metrics.e),
        s_placeholder=str(metrics.s),
        g_placeholder=str(metrics.g),
    )
    return BuiltPrompt(text=text)


def build_book_guide_prompt(book: BookGuideRequest) -> BuiltPrompt:
    text = fill_template(
        BOOK_GUIDE_PROMPT,
        title_placeholder=book.title,
        author_placeholder=book.author or '佚名',
        description_placeholder=book.description or '無',
    )
    return BuiltPrompt(text=text)


def build_daily_missions_prompt(level: int) -> BuiltPrompt:
    text = fill_template(DAILY_MISSIONS_PROMPT, level_placeholder=str(level))
    return BuiltPrompt(text=text, json_output=True)


def build_tag_suggestion_prompt(content: str, existing_tags: List[Tag]) -> BuiltPrompt:
    text = fill_template(
        TAG_SUGGESTION_PROMPT,
        existing_placeholder=", ".join(t.name for t in existing_tags),
        content_placeholder=content[:TAG_CONTENT_PREVIEW_CHARS],
    )
    return BuiltPrompt(text=text, json_output=True)


def build_chat_prompt(message: str, context: ChatContext) -> BuiltPrompt:
    integrations = ", ".join([
        _integration_status("Flowlu", context.integrations.flowlu),
        _integration_status("Blue.cc", context.integrations.bluecc),
    ])
    text = fill_template(
        CHAT_PROMPT,
        tab_placeholder=context.currentTab,
        role_placeholder=context.userRole or '訪客',
        memory_placeholder="; ".join(m.content for m in context.memory) or "無",
        integrations_placeholder=integrations,
        message_placeholder=message,
    )
    return BuiltPrompt(text=text, capabilities=(Capability.WEB_SEARCH, Capability.NAVIGATION))


def build_esg_report_prompt(params: ReportDraftRequest) -> BuiltPrompt:
    text = fill_template(
        ESG_REPORT_PROMPT,
        company_placeholder=params.companyName,
        industry_placeholder=params.industry,
        framework_placeholder=params.framework,
        sections_placeholder=", ".join(params.selectedSections) or '標準全套',
        tags_placeholder=", ".join(t.name for t in params.tags) or '無',
        data_placeholder=params.rawData,
    )
    return BuiltPrompt(text=text)


def build_refine_report_prompt(report: str, instruction: str) -> BuiltPrompt:
    text = fill_template(REFINE_REPORT_PROMPT, instruction_placeholder=instruction, report_placeholder=report)
    return BuiltPrompt(text=text)


def build_intelligence_prompt(topic: str) -> BuiltPrompt:
    text = fill_template(INTELLIGENCE_PROMPT, topic_placeholder=topic)
    return BuiltPrompt(text=text, capabilities=(Capability.WEB_SEARCH,), json_output=True)


def build_regenerative_prompt(context: str) -> BuiltPrompt:
    text = fill_template(
        REGENERATIVE_PROMPT,
        layers_placeholder=", ".join(REGENERATIVE_LAYER_NAMES),
        context_placeholder=context,
    )
    return BuiltPrompt(text=text, json_output=True)
