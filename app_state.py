"""
Caller-owned session state for the dashboard.

The content service is stateless; everything a session accumulates (coins,
missions, the tag pool, the chat transcript...) lives in an AppState owned by
the caller. Every helper here returns a new AppState instead of mutating the
one it was given.
"""

import logging
import time
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from api.pydantic_models import (
    ChatReply, GroundingSource, IntegrationConnection, IntegrationState,
    MemoryFact, Mission, SECTION_IDS, TabId, Tag,
)
from response_parser import new_id

logger = logging.getLogger(__name__)

BOOK_GUIDE_REWARD = 30
TRACK_COMPLETION_REWARD = 500
NEW_TAG_COLOR = "bg-slate-100 text-slate-600"


class CollectionItem(BaseModel):
    id: str
    name: str
    type: Literal['artifact', 'tool', 'skin']
    icon: str
    rarity: Literal['common', 'rare', 'epic', 'legendary']
    acquiredDate: int

class UserState(BaseModel):
    name: str
    role: str
    coins: int = 0
    xp: int = 0
    level: int = 1
    maxXp: int = 1000
    badges: List[str] = []
    inventory: List[CollectionItem] = []
    memory: List[MemoryFact] = []
    integrations: IntegrationState = Field(default_factory=IntegrationState)

class ChatMessage(BaseModel):
    id: str
    role: Literal['user', 'model']
    text: str
    timestamp: int
    sources: Optional[List[GroundingSource]] = None
    actionPerformed: Optional[str] = None

class InfrastructureTask(BaseModel):
    id: str
    title: str
    completed: bool = False
    aiHelp: str = ''

class InfrastructureTrack(BaseModel):
    id: str
    title: str
    progress: int = 0
    tasks: List[InfrastructureTask] = []
    icon: str = ''

class CharityProject(BaseModel):
    id: str
    title: str
    target: int
    raised: int = 0
    desc: str = ''

class AppState(BaseModel):
    user: UserState
    activeTab: TabId = 'dashboard'
    missions: List[Mission] = []
    globalTags: List[Tag] = []
    chatHistory: List[ChatMessage] = []
    tracks: List[InfrastructureTrack] = []
    charities: List[CharityProject] = []


def _now_ms() -> int:
    return int(time.time() * 1000)


def initial_state() -> AppState:
    now = _now_ms()
    return AppState(
        user=UserState(
            name='Jun Hong', role='策略長', coins=1250, xp=4500, level=5, maxXp=5000,
            badges=['先驅者', '分析師'],
            inventory=[CollectionItem(id='1', name='綠色藍圖', type='artifact', icon='FileText',
                                      rarity='rare', acquiredDate=now)],
        ),
        missions=[
            Mission(id='1', title='每日碳排紀錄', desc='填寫數據', reward=50, type='daily'),
            Mission(id='2', title='Salon 共讀', desc='發表心得', reward=100, type='learning'),
        ],
        globalTags=[Tag(id='t1', name='策略', color='bg-blue-100 text-blue-700')],
        chatHistory=[ChatMessage(id='0', role='model', text='您好，我是 JunAi。', timestamp=now)],
        tracks=[
            InfrastructureTrack(id='t1', title='行政優化', progress=50, icon='FileText', tasks=[
                InfrastructureTask(id='1', title='導入電子簽核', completed=True, aiHelp='如何評估電子簽核供應商？'),
                InfrastructureTask(id='2', title='文件無紙化流程', aiHelp='無紙化過渡期的管理策略'),
            ]),
            InfrastructureTrack(id='t2', title='治理架構', progress=0, icon='ShieldCheck', tasks=[
                InfrastructureTask(id='3', title='成立 ESG 委員會', aiHelp='ESG 委員會的職權範疇範本'),
                InfrastructureTask(id='4', title='利害關係人議合機制', aiHelp='如何設計議合問卷？'),
            ]),
        ],
        charities=[
            CharityProject(id='c1', title='百萬植樹計畫', target=50000, raised=32450, desc='在都市周邊建立生態廊道。'),
            CharityProject(id='c2', title='偏鄉數位教育', target=20000, raised=18900, desc='提供偏鄉學童平板與程式課程。'),
        ],
    )


# --- Coins & rewards ---

def add_coins(state: AppState, amount: int) -> AppState:
    user = state.user.model_copy(update={"coins": state.user.coins + amount})
    return state.model_copy(update={"user": user})


def award_book_guide(state: AppState) -> AppState:
    return add_coins(state, BOOK_GUIDE_REWARD)


def donate(state: AppState, charity_id: str, amount: int) -> AppState:
    if not any(c.id == charity_id for c in state.charities):
        raise ValueError(f"Unknown charity project: {charity_id}")
    charities = [
        c.model_copy(update={"raised": c.raised + amount}) if c.id == charity_id else c
        for c in state.charities
    ]
    return add_coins(state, -amount).model_copy(update={"charities": charities})


# --- Missions ---

def replace_missions(state: AppState, missions: List[Mission]) -> AppState:
    return state.model_copy(update={"missions": list(missions)})


def complete_mission(state: AppState, mission_id: str) -> AppState:
    """Mark a mission completed and pay out its reward. Completing twice pays once."""
    mission = next((m for m in state.missions if m.id == mission_id), None)
    if mission is None or mission.completed:
        return state
    missions = [
        m.model_copy(update={"completed": True}) if m.id == mission_id else m
        for m in state.missions
    ]
    return add_coins(state, mission.reward or 0).model_copy(update={"missions": missions})


# --- Tags ---

def resolve_tag(pool: List[Tag], name: str) -> Tag:
    """Reuse a pooled tag whose name matches case-insensitively, else mint a new one."""
    wanted = name.strip()
    existing = next((t for t in pool if t.name.lower() == wanted.lower()), None)
    if existing is not None:
        return existing
    return Tag(id=new_id("new"), name=wanted, color=NEW_TAG_COLOR)


def add_global_tags(state: AppState, tags: List[Tag]) -> AppState:
    # AI-suggested tags are appended as-is, same as the dashboard does
    return state.model_copy(update={"globalTags": state.globalTags + list(tags)})


# --- Infrastructure tracks ---

def toggle_infrastructure_task(state: AppState, track_id: str, task_id: str) -> AppState:
    bonus = 0
    tracks = []
    for track in state.tracks:
        if track.id != track_id:
            tracks.append(track)
            continue
        tasks = [
            t.model_copy(update={"completed": not t.completed}) if t.id == task_id else t
            for t in track.tasks
        ]
        progress = round(sum(1 for t in tasks if t.completed) / len(tasks) * 100) if tasks else 0
        if progress == 100 and track.progress < 100:
            bonus += TRACK_COMPLETION_REWARD
        tracks.append(track.model_copy(update={"tasks": tasks, "progress": progress}))
    return add_coins(state, bonus).model_copy(update={"tracks": tracks})


# --- Memory & integrations ---

def remember(state: AppState, content: str, fact_type: str = 'context') -> AppState:
    fact = MemoryFact(id=new_id("mem"), content=content, timestamp=_now_ms(), type=fact_type)
    user = state.user.model_copy(update={"memory": state.user.memory + [fact]})
    return state.model_copy(update={"user": user})


def set_integration(state: AppState, name: str, connected: bool, api_key: Optional[str] = None) -> AppState:
    if name not in ("flowlu", "bluecc"):
        raise ValueError(f"Unknown integration: {name}")
    connection = IntegrationConnection(
        connected=connected,
        apiKey=api_key,
        lastSync=_now_ms() if connected else None,
    )
    integrations = state.user.integrations.model_copy(update={name: connection})
    user = state.user.model_copy(update={"integrations": integrations})
    return state.model_copy(update={"user": user})


# --- Chat transcript ---

def append_chat_message(state: AppState, role: str, text: str,
                        sources: Optional[List[GroundingSource]] = None,
                        action_performed: Optional[str] = None) -> AppState:
    message = ChatMessage(
        id=new_id("msg"), role=role, text=text, timestamp=_now_ms(),
        sources=sources, actionPerformed=action_performed,
    )
    return state.model_copy(update={"chatHistory": state.chatHistory + [message]})


def clear_chat(state: AppState) -> AppState:
    return state.model_copy(update={"chatHistory": []})


def apply_chat_reply(state: AppState, reply: ChatReply) -> AppState:
    """Append the model's reply and carry out its navigation action, if any."""
    performed = None
    active_tab = state.activeTab
    if reply.action is not None and reply.action.type == 'NAVIGATE':
        target = reply.action.payload.get("tabId")
        if target in SECTION_IDS:
            active_tab = target
            performed = f"NAVIGATE:{target}"
        else:
            logger.warning(f"Ignoring navigation to unknown section '{target}'")
    new_state = append_chat_message(state, 'model', reply.text, reply.sources or None, performed)
    return new_state.model_copy(update={"activeTab": active_tab})
