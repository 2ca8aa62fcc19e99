from pydantic import BaseModel, Field, TypeAdapter
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

# --- SHARED ENUMERATIONS ---
TabId = Literal[
    'dashboard', 'health', 'services', 'intelligence', 'netzero',
    'report', 'regenerative', 'academy', 'salon', 'about'
]
# Closed set offered to the model through the navigation function
SECTION_IDS = (
    'dashboard', 'health', 'services', 'intelligence', 'netzero',
    'report', 'regenerative', 'academy', 'salon', 'about'
)

ReportFramework = Literal['GRI', 'SASB', 'TCFD', 'ISSB']

REGENERATIVE_LAYER_NAMES = ('Philosophy', 'Strategy', 'Innovation', 'Learning', 'Regeneration')

# Model scores are not clamped, so keep whatever numeric type came back
Score = Union[int, float]

# --- TAGS, CITATIONS & ACTIONS ---
class Tag(BaseModel):
    id: str
    name: str
    color: str

# Model-suggested tags are passed through even when name or color is missing
class SuggestedTag(Tag):
    name: Optional[str] = None
    color: Optional[str] = None

class GroundingSource(BaseModel):
    title: Optional[str] = None
    uri: str

class AgentAction(BaseModel):
    type: Literal['NAVIGATE', 'REFINE_REPORT', 'ANALYZE_DATA']
    payload: Dict[str, Any] = {}

# --- CHAT CONTEXT ---
class MemoryFact(BaseModel):
    id: str
    content: str
    timestamp: int = 0
    type: Literal['preference', 'context', 'decision'] = 'context'

class IntegrationConnection(BaseModel):
    connected: bool = False
    apiKey: Optional[str] = None
    domain: Optional[str] = None
    lastSync: Optional[int] = None

class IntegrationState(BaseModel):
    flowlu: IntegrationConnection = Field(default_factory=IntegrationConnection)
    bluecc: IntegrationConnection = Field(default_factory=IntegrationConnection)

class ChatContext(BaseModel):
    currentTab: TabId = 'dashboard'
    userRole: str = ''
    memory: List[MemoryFact] = []
    integrations: IntegrationState = Field(default_factory=IntegrationState)

# --- OPERATION REQUESTS ---
class DiagnoseRequest(BaseModel):
    kind: Literal['diagnose'] = 'diagnose'
    e: int = Field(ge=0, le=100)
    s: int = Field(ge=0, le=100)
    g: int = Field(ge=0, le=100)

class BookGuideRequest(BaseModel):
    kind: Literal['book_guide'] = 'book_guide'
    title: str
    author: str = ''
    description: str = ''
    category: Optional[str] = None
    id: Optional[str] = None
    cover: Optional[str] = None

class DailyMissionsRequest(BaseModel):
    kind: Literal['daily_missions'] = 'daily_missions'
    level: int = Field(default=1, ge=1)

class TagSuggestionRequest(BaseModel):
    kind: Literal['tag_suggestion'] = 'tag_suggestion'
    content: str
    existingTags: List[Tag] = []

class ChatRequest(BaseModel):
    kind: Literal['chat'] = 'chat'
    message: str = Field(min_length=1)
    context: ChatContext = Field(default_factory=ChatContext)

class ReportDraftRequest(BaseModel):
    kind: Literal['report_draft'] = 'report_draft'
    companyName: str
    industry: str = ''
    framework: ReportFramework = 'GRI'
    rawData: str = ''
    selectedSections: List[str] = []
    tags: List[Tag] = []

class ReportRefineRequest(BaseModel):
    kind: Literal['report_refine'] = 'report_refine'
    report: str
    instruction: str = ''

class IntelligenceRequest(BaseModel):
    kind: Literal['intelligence_analysis'] = 'intelligence_analysis'
    topic: str

class RegenerativeRequest(BaseModel):
    kind: Literal['regenerative_analysis'] = 'regenerative_analysis'
    context: str

OperationRequest = Annotated[
    Union[
        DiagnoseRequest, BookGuideRequest, DailyMissionsRequest, TagSuggestionRequest,
        ChatRequest, ReportDraftRequest, ReportRefineRequest, IntelligenceRequest,
        RegenerativeRequest,
    ],
    Field(discriminator='kind'),
]
operation_request_adapter = TypeAdapter(OperationRequest)

# --- OPERATION RESULTS ---
# Fields the model may leave out stay Optional so partial responses pass through.
class Mission(BaseModel):
    id: str
    title: Optional[str] = None
    desc: Optional[str] = None
    reward: Optional[int] = None
    completed: bool = False
    type: Literal['daily', 'project', 'learning'] = 'daily'
    tags: Optional[List[Tag]] = None

class StakeholderScores(BaseModel):
    government: Optional[Score] = None
    ngo: Optional[Score] = None
    investors: Optional[Score] = None
    supplyChain: Optional[Score] = None
    consumers: Optional[Score] = None

class IntelligenceResult(BaseModel):
    topic: str
    sentiment: Optional[Score] = None
    stakeholders: Optional[StakeholderScores] = None
    insights: Optional[List[str]] = None
    tags: List[Tag] = []
    sources: List[GroundingSource] = []

class RegenerativeLayer(BaseModel):
    id: str
    layer: Optional[str] = None
    score: Optional[Score] = None
    analysis: Optional[str] = None

class ChatReply(BaseModel):
    text: str
    sources: List[GroundingSource] = []
    action: Optional[AgentAction] = None

class BlueCCSnapshot(BaseModel):
    scope3: int
    suppliers: int
