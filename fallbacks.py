"""Default results returned when Gemini is not configured or a call fails."""

from typing import List

from api.pydantic_models import ChatReply, IntelligenceResult, Mission, StakeholderScores, Tag
from response_parser import new_id

NO_API_KEY_MESSAGE = "請配置 API Key。"
DIAGNOSIS_FAILED_MESSAGE = "診斷暫時無法生成，請稍後再試。"
BOOK_GUIDE_FAILED_MESSAGE = "導讀暫時無法生成，請稍後再試。"
REPORT_FAILED_MESSAGE = "生成失敗"
CHAT_CONNECTION_ERROR = "連線異常。"
CHAT_EMPTY_TEXT = "思考中..."
INTELLIGENCE_NO_KEY_INSIGHT = "API Key 未配置"
INTELLIGENCE_ERROR_INSIGHT = "分析錯誤"

STARTER_MISSIONS = (
    {"title": "閱讀氣候新聞", "desc": "了解 COP 最新決議", "reward": 50},
    {"title": "零廢棄午餐", "desc": "紀錄垃圾量", "reward": 100},
    {"title": "讚賞同事", "desc": "感謝同事貢獻", "reward": 80},
)

DEFAULT_TAG_NAME = "ESG"
DEFAULT_TAG_COLOR = "bg-green-100 text-green-700"


def starter_missions() -> List[Mission]:
    return [Mission(id=new_id("m"), completed=False, type="daily", **m) for m in STARTER_MISSIONS]


def default_tags() -> List[Tag]:
    return [Tag(id=new_id("tag"), name=DEFAULT_TAG_NAME, color=DEFAULT_TAG_COLOR)]


def intelligence_result(topic: str, insight: str) -> IntelligenceResult:
    """All five stakeholder axes present and zeroed, with a single diagnostic insight."""
    return IntelligenceResult(
        topic=topic,
        sentiment=0,
        stakeholders=StakeholderScores(government=0, ngo=0, investors=0, supplyChain=0, consumers=0),
        insights=[insight],
        tags=[],
        sources=[],
    )


def chat_reply(text: str) -> ChatReply:
    return ChatReply(text=text, sources=[], action=None)
