"""
Static content tables.

Read-only definitions consumed by the engines: project types, the research
tree seed, the rival roster and their action catalog, company phases and the
office size ladder. Factories return fresh copies so no run ever shares
mutable entities with another.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models import Competitor, ResearchNode


@dataclass(frozen=True)
class ProjectType:
    id: str
    name: str
    description: str
    complexity: str
    base_cost: float
    base_time: int
    base_quality: float
    market_appeal: float
    min_team_size: int
    max_team_size: int
    required_tech: Tuple[str, ...] = ()


PROJECT_TYPES: List[ProjectType] = [
    ProjectType("chatbot-basic", "Basic Chatbot", "A friendly bot that mostly answers questions.",
                "simple", 5000, 20, 3, 3, 1, 2),
    ProjectType("image-classifier", "Image Classifier", "Hot dog or not hot dog, at scale.",
                "simple", 8000, 25, 3, 4, 1, 3, ("transformer-basics",)),
    ProjectType("efficient-api", "Inference API", "Cheap tokens for everyone.",
                "simple", 10000, 30, 3.5, 4, 1, 3, ("efficient-training",)),
    ProjectType("code-assistant", "Code Assistant", "Autocomplete that occasionally writes tests.",
                "medium", 15000, 40, 4, 6, 2, 4, ("transformer-advanced",)),
    ProjectType("aligned-assistant", "Aligned Assistant", "A chatbot that says no politely.",
                "medium", 25000, 50, 5, 7, 2, 5, ("rlhf-basics",)),
    ProjectType("vision-app", "Vision App", "It sees. It describes. It judges your fridge.",
                "medium", 30000, 55, 4, 7, 2, 5, ("vision-models",)),
    ProjectType("multimodal-model", "Multimodal Model", "Text, images and vibes in one model.",
                "complex", 60000, 90, 5, 9, 3, 6, ("multimodal-basics", "transformer-advanced")),
    ProjectType("safety-framework", "Safety Framework", "Guardrails the regulators might even read.",
                "complex", 50000, 80, 6, 8, 3, 6, ("constitutional-ai",)),
    ProjectType("autonomous-agent", "Autonomous Agent", "Books your flights. Sometimes the right ones.",
                "complex", 90000, 120, 6, 12, 4, 8, ("agent-systems",)),
    ProjectType("frontier-model", "Frontier Model", "The biggest model anyone has trained this month.",
                "revolutionary", 200000, 180, 7, 15, 5, 10, ("agent-systems", "neural-architecture")),
    ProjectType("agi", "AGI", "The one everyone keeps promising.",
                "revolutionary", 500000, 365, 8, 20, 5, 12, ("agi-research",)),
]

PROJECT_TYPES_BY_ID: Dict[str, ProjectType] = {pt.id: pt for pt in PROJECT_TYPES}


def get_project_type(type_id: str) -> Optional[ProjectType]:
    return PROJECT_TYPES_BY_ID.get(type_id)


# (id, name, description, cost, timeRequired, prerequisites, unlocks)
_RESEARCH_TREE = [
    ("transformer-basics", "Transformer Basics", "Learn the fundamentals of attention mechanisms",
     5000, 30, [], ["transformer-advanced", "multimodal-basics", "efficient-training"]),
    ("transformer-advanced", "Transformer 2.0", "Attention is All You Need... Again",
     15000, 60, ["transformer-basics"], ["rlhf-basics", "few-shot-learning", "neural-architecture"]),
    ("rlhf-basics", "RLHF for Dummies", "Make models say what you want them to say",
     20000, 45, ["transformer-advanced"], ["constitutional-ai", "reinforcement-learning"]),
    ("constitutional-ai", "Constitutional AI (The Sequel)", "AI that follows rules... sometimes",
     30000, 90, ["rlhf-basics"], ["agent-systems"]),
    ("multimodal-basics", "Multimodal Foundations", "Teach models to look at pictures",
     25000, 75, ["transformer-basics"], ["vision-models"]),
    ("vision-models", "GPT-Vision", "Now it can misread charts too",
     35000, 90, ["multimodal-basics"], []),
    ("agent-systems", "AutoGPT but Actually Good", "Agents that finish what they start",
     50000, 120, ["constitutional-ai"], ["agi-research"]),
    ("agi-research", "AGI Research", "The final frontier. Probably.",
     100000, 365, ["agent-systems"], []),
    ("efficient-training", "Efficient Training Methods", "Same model, half the GPUs",
     12000, 45, ["transformer-basics"], []),
    ("few-shot-learning", "Few-Shot Learning", "Learning from three examples and a prayer",
     18000, 50, ["transformer-advanced"], []),
    ("reinforcement-learning", "Reinforcement Learning", "Reward the model, hope for the best",
     22000, 55, ["rlhf-basics"], []),
    ("neural-architecture", "Neural Architecture Search", "Let the model design the model",
     28000, 70, ["transformer-advanced"], []),
]


def initial_research_nodes() -> List[ResearchNode]:
    """Fresh research tree. Only nodes without prerequisites start unlocked."""
    return [
        ResearchNode(
            id=node_id,
            name=name,
            description=description,
            cost=cost,
            time_required=time_required,
            unlocked=not prerequisites,
            prerequisites=list(prerequisites),
            unlocks=list(unlocks),
        )
        for node_id, name, description, cost, time_required, prerequisites, unlocks in _RESEARCH_TREE
    ]


_COMPETITORS = [
    ("cortex", "Cortex Systems", "We'll make AGI safe... eventually", 35, 85),
    ("ethos", "Ethos AI", "Constitutional AI experts", 20, 75),
    ("nexus", "Nexus Intelligence", "We solve games, not problems", 25, 80),
    ("collective", "Collective Labs", "Open source everything... except the good stuff", 15, 70),
    ("omnicorp", "OmniCorp Research", "We have 50 AI products, pick one", 5, 65),
]


def initial_competitors() -> List[Competitor]:
    return [
        Competitor(id=cid, name=name, tagline=tagline, market_share=share, reputation=rep)
        for cid, name, tagline, share, rep in _COMPETITORS
    ]


@dataclass(frozen=True)
class CompetitorAction:
    headline: str  # '{name}' is replaced by the rival's name
    icon: str
    share_boost: float
    rep_boost: float


COMPETITOR_ACTIONS: List[CompetitorAction] = [
    CompetitorAction("{name} launched a new AI chatbot product", "🚀", 1.5, 3),
    CompetitorAction("{name} raised $200M in Series D funding", "💰", 2, 2),
    CompetitorAction("{name} hired 50 top ML engineers", "👥", 1, 2),
    CompetitorAction("{name} published breakthrough research paper", "📄", 0.5, 5),
    CompetitorAction("{name} partnered with a Fortune 500 company", "🤝", 2, 3),
    CompetitorAction("{name} open-sourced their latest model", "🔓", -1, 6),
    CompetitorAction("{name} suffered a major data breach", "🔥", -3, -8),
    CompetitorAction("{name} CEO made controversial AI safety claims", "🗣️", -1, -4),
    CompetitorAction("{name} acquired a promising AI startup", "🏢", 2.5, 2),
    CompetitorAction("{name} launched an enterprise AI platform", "🏗️", 1.5, 2),
    CompetitorAction("{name} won a major government contract", "🏛️", 3, 4),
    CompetitorAction("{name} product went viral on social media", "📈", 2, 3),
    CompetitorAction("{name} faced regulatory scrutiny over AI ethics", "⚖️", -2, -5),
    CompetitorAction("{name} released disappointing quarterly earnings", "📉", -2, -3),
    CompetitorAction("{name} demoed AGI prototype at tech conference", "🤖", 1, 7),
]


@dataclass(frozen=True)
class CompanyPhase:
    """
    A milestone tier. Requirement fields left as None are always satisfied.
    """

    id: str
    name: str
    description: str
    money: Optional[float] = None
    reputation: Optional[float] = None
    employees: Optional[int] = None
    projects_completed: Optional[int] = None
    research_completed: Optional[int] = None
    unlock_funding: bool = False
    passive_income_bonus: Optional[float] = None
    reputation_gain: float = 0


COMPANY_PHASES: List[CompanyPhase] = [
    CompanyPhase("startup", "Startup", "Just getting started. Every empire begins here."),
    CompanyPhase("growth", "Growth Stage", "You have traction. Investors are starting to notice.",
                 money=250_000, reputation=25, employees=3, projects_completed=3,
                 unlock_funding=True, reputation_gain=10),
    CompanyPhase("scale", "Scale-Up", "Scaling the team and the vision. The market is listening.",
                 money=1_000_000, reputation=75, employees=10, projects_completed=10,
                 passive_income_bonus=1.1, reputation_gain=15),
    CompanyPhase("unicorn", "Unicorn", "$1B+ valuation energy. You are the disruptor.",
                 money=5_000_000, reputation=150, employees=25, projects_completed=25,
                 passive_income_bonus=1.25, reputation_gain=25),
    CompanyPhase("empire", "Empire", "Industry-defining. Your lab is the standard.",
                 money=25_000_000, reputation=300, employees=50, projects_completed=50,
                 passive_income_bonus=1.5, reputation_gain=50),
    CompanyPhase("legend", "Legend", "The endless frontier. There is no ceiling.",
                 money=100_000_000, reputation=500, employees=100, projects_completed=100,
                 passive_income_bonus=2, reputation_gain=100),
]

PHASE_ORDER: List[str] = [phase.id for phase in COMPANY_PHASES]


def get_phase(phase_id: str) -> Optional[CompanyPhase]:
    return next((phase for phase in COMPANY_PHASES if phase.id == phase_id), None)


# Office size ladder
OFFICE_SIZES: List[str] = ["hacker_den", "small", "medium", "large", "campus"]
OFFICE_SIZE_COSTS: Dict[str, float] = {
    "hacker_den": 0,
    "small": 10000,
    "medium": 50000,
    "large": 200000,
    "campus": 500000,
}
OFFICE_RENTS: Dict[str, float] = {
    "hacker_den": 500,
    "small": 1500,
    "medium": 5000,
    "large": 15000,
    "campus": 50000,
}

LEGACY_UPGRADE_COSTS: Dict[str, float] = {
    "computers": 2000,
    "coffeeMachines": 500,
    "serverRacks": 5000,
    "meetingRooms": 3000,
    "napPods": 1000,
}

TRAINING_COSTS: Dict[str, float] = {
    "development": 5000,
    "research": 5000,
    "creativity": 3000,
    "management": 4000,
}

MAX_SKILL = 10
TRAINING_SALARY_RAISE = 1.1


def size_index(size: str) -> int:
    return OFFICE_SIZES.index(size)
