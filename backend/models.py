"""
AI Lab Data Model

Plain dataclasses for every entity in the simulation, plus the GameState
root aggregate. Engines never mutate these in place; they build new copies
with dataclasses.replace() and the session commits the result.

Serialization uses the camelCase layout of the persisted save so that older
saves keep loading. Each from_dict() fills missing keys from documented
defaults field by field.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional

SKILL_NAMES = ("research", "development", "creativity", "management")
ROLES = ("researcher", "engineer", "designer", "manager", "intern")
COMPLEXITIES = ("simple", "medium", "complex", "revolutionary")
POLICIES = ("balanced", "crunch", "wellness")
NOTIFICATION_TYPES = ("success", "info", "warning", "error")
LEGACY_UPGRADES = ("computers", "coffeeMachines", "serverRacks", "meetingRooms", "napPods")


def parse_date(value: Any, default: date) -> date:
    """Accept either a plain ISO date or a full ISO timestamp."""
    if not value:
        return default
    return date.fromisoformat(str(value)[:10])


@dataclass(slots=True)
class Employee:
    """A member of staff. Skills are integer levels 0-10."""

    id: str
    name: str
    role: str
    skills: Dict[str, int]
    salary: float
    morale: float
    traits: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"unknown role: {self.role}")
        for skill in SKILL_NAMES:
            self.skills.setdefault(skill, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "skills": dict(self.skills),
            "salary": self.salary,
            "morale": self.morale,
            "traits": list(self.traits),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Employee":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            role=data.get("role", "engineer"),
            skills=dict(data.get("skills", {})),
            salary=data.get("salary", 0),
            morale=data.get("morale", 70),
            traits=list(data.get("traits", [])),
        )


@dataclass(slots=True)
class Project:
    """An active project. Removed from the active list on completion."""

    id: str
    name: str
    type: str
    complexity: str
    progress: float
    max_progress: float
    team: List[str] = field(default_factory=list)
    quality: float = 0.0
    market_appeal: float = 1.0

    def __post_init__(self):
        if self.complexity not in COMPLEXITIES:
            raise ValueError(f"unknown complexity: {self.complexity}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "complexity": self.complexity,
            "progress": self.progress,
            "maxProgress": self.max_progress,
            "team": list(self.team),
            "quality": self.quality,
            "marketAppeal": self.market_appeal,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            type=data.get("type", "chatbot-basic"),
            complexity=data.get("complexity", "simple"),
            progress=data.get("progress", 0),
            max_progress=data.get("maxProgress", 1),
            team=list(data.get("team", [])),
            quality=data.get("quality", 0),
            market_appeal=data.get("marketAppeal", 1),
        )


@dataclass(slots=True)
class ResearchNode:
    """
    One node of the tech tree.

    progress == 0 means available but not started; starting a node costs
    money and sets progress to 1.
    """

    id: str
    name: str
    cost: float
    time_required: int
    description: str = ""
    progress: float = 0
    unlocked: bool = False
    completed: bool = False
    prerequisites: List[str] = field(default_factory=list)
    unlocks: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "cost": self.cost,
            "timeRequired": self.time_required,
            "progress": self.progress,
            "unlocked": self.unlocked,
            "completed": self.completed,
            "prerequisites": list(self.prerequisites),
            "unlocks": list(self.unlocks),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResearchNode":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            cost=data.get("cost", 0),
            time_required=data.get("timeRequired", 1),
            progress=data.get("progress", 0),
            unlocked=data.get("unlocked", False),
            completed=data.get("completed", False),
            prerequisites=list(data.get("prerequisites", [])),
            unlocks=list(data.get("unlocks", [])),
        )


@dataclass(slots=True)
class OfficeRoom:
    """A freely placed grid room (legacy bonus source)."""

    id: str
    type_id: str
    grid_x: int
    grid_y: int
    level: int = 1
    condition: float = 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "typeId": self.type_id,
            "gridX": self.grid_x,
            "gridY": self.grid_y,
            "level": self.level,
            "condition": self.condition,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OfficeRoom":
        return cls(
            id=data["id"],
            type_id=data["typeId"],
            grid_x=data.get("gridX", 0),
            grid_y=data.get("gridY", 0),
            level=data.get("level", 1),
            condition=data.get("condition", 100),
        )


@dataclass(slots=True)
class InstalledUpgrade:
    """An upgrade sitting in one named layout slot."""

    slot_id: str
    upgrade_id: str
    level: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"slotId": self.slot_id, "upgradeId": self.upgrade_id, "level": self.level}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstalledUpgrade":
        return cls(slot_id=data["slotId"], upgrade_id=data["upgradeId"], level=data.get("level", 1))


@dataclass(slots=True)
class Office:
    """Office size tier plus both bonus sources (rooms and slot upgrades)."""

    size: str = "hacker_den"
    level: int = 1
    rent: float = 500
    upgrades: Dict[str, int] = field(default_factory=lambda: {name: 0 for name in LEGACY_UPGRADES})
    rooms: List[OfficeRoom] = field(default_factory=list)
    grid_width: int = 4
    grid_height: int = 3
    installed_upgrades: List[InstalledUpgrade] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "size": self.size,
            "upgrades": dict(self.upgrades),
            "rent": self.rent,
            "rooms": [room.to_dict() for room in self.rooms],
            "gridWidth": self.grid_width,
            "gridHeight": self.grid_height,
            "installedUpgrades": [u.to_dict() for u in self.installed_upgrades],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], defaults: "Office") -> "Office":
        upgrades = {name: 0 for name in LEGACY_UPGRADES}
        upgrades.update(data.get("upgrades", defaults.upgrades))
        rooms = data.get("rooms")
        installed = data.get("installedUpgrades")
        return cls(
            size=data.get("size", defaults.size),
            level=data.get("level", defaults.level),
            rent=data.get("rent", defaults.rent),
            upgrades=upgrades,
            rooms=[OfficeRoom.from_dict(r) for r in rooms] if rooms is not None else list(defaults.rooms),
            grid_width=data.get("gridWidth", defaults.grid_width),
            grid_height=data.get("gridHeight", defaults.grid_height),
            installed_upgrades=(
                [InstalledUpgrade.from_dict(u) for u in installed]
                if installed is not None else list(defaults.installed_upgrades)
            ),
        )


@dataclass(slots=True)
class Competitor:
    """A rival lab. recent_activity is newest first, capped."""

    id: str
    name: str
    tagline: str
    market_share: float
    reputation: float
    recent_activity: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tagline": self.tagline,
            "marketShare": self.market_share,
            "reputation": self.reputation,
            "recentActivity": list(self.recent_activity),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Competitor":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            tagline=data.get("tagline", ""),
            market_share=data.get("marketShare", 1),
            reputation=data.get("reputation", 50),
            recent_activity=list(data.get("recentActivity", [])),
        )


@dataclass(slots=True)
class ShippedProduct:
    id: str
    name: str
    daily_revenue: int
    unlocked_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dailyRevenue": self.daily_revenue,
            "unlockedAt": self.unlocked_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShippedProduct":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            daily_revenue=data.get("dailyRevenue", 0),
            unlocked_at=data.get("unlockedAt", ""),
        )


@dataclass(slots=True)
class Challenge:
    """A daily or weekly objective tracking a single goal type."""

    id: str
    type: str
    title: str
    description: str
    goal_type: str
    target: float
    reward_money: float
    reward_reputation: float
    reward_legacy: float = 0
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "goalType": self.goal_type,
            "target": self.target,
            "rewardMoney": self.reward_money,
            "rewardReputation": self.reward_reputation,
            "rewardLegacy": self.reward_legacy,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Challenge":
        return cls(
            id=data["id"],
            type=data.get("type", "daily"),
            title=data.get("title", ""),
            description=data.get("description", ""),
            goal_type=data["goalType"],
            target=data.get("target", 1),
            reward_money=data.get("rewardMoney", 0),
            reward_reputation=data.get("rewardReputation", 0),
            reward_legacy=data.get("rewardLegacy") or 0,
            completed=data.get("completed", False),
        )


@dataclass(slots=True)
class CompetitorNewsItem:
    day: int
    competitor: str
    headline: str
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "competitor": self.competitor, "headline": self.headline, "icon": self.icon}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompetitorNewsItem":
        return cls(
            day=data.get("day", 0),
            competitor=data.get("competitor", ""),
            headline=data.get("headline", ""),
            icon=data.get("icon", ""),
        )


@dataclass(slots=True)
class Notification:
    """A display payload. duration is in milliseconds."""

    message: str
    type: str = "info"
    duration: int = 3000

    def __post_init__(self):
        if self.type not in NOTIFICATION_TYPES:
            raise ValueError(f"unknown notification type: {self.type}")

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "type": self.type, "duration": self.duration}


@dataclass(slots=True)
class GameState:
    """
    Root aggregate for one company run.

    Content (project types, events, challenge templates, layouts) is
    referenced by id so the whole tree serializes to flat JSON.
    """

    # Core resources
    money: float = 100000.0
    reputation: float = 0.0
    research_points: float = 0.0
    current_date: date = date(2024, 1, 1)

    # Entities
    employees: List[Employee] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    research_nodes: List[ResearchNode] = field(default_factory=list)
    office: Office = field(default_factory=Office)
    competitors: List[Competitor] = field(default_factory=list)
    shipped_products: List[ShippedProduct] = field(default_factory=list)
    policy: str = "balanced"

    # Unlocked content
    unlocked_technologies: List[str] = field(default_factory=list)
    unlocked_project_types: List[str] = field(default_factory=lambda: ["chatbot-basic"])
    funding_round: str = "none"
    company_phase: str = "startup"

    # Challenges
    daily_challenge: Optional[Challenge] = None
    weekly_challenge: Optional[Challenge] = None
    daily_challenge_progress: Dict[str, float] = field(default_factory=dict)
    weekly_challenge_progress: Dict[str, float] = field(default_factory=dict)
    daily_challenge_day_seed: int = 0
    weekly_challenge_week_seed: int = 0

    # Prestige
    prestige_level: int = 0
    legacy_points: float = 0

    # Events and achievements
    active_event_id: Optional[str] = None
    event_history: List[str] = field(default_factory=list)
    unlocked_achievements: List[str] = field(default_factory=list)

    # Statistics
    total_projects_completed: int = 0
    total_contracts_completed: int = 0
    total_trainings_done: int = 0
    total_daily_challenges_completed: int = 0
    total_weekly_challenges_completed: int = 0
    days_played: int = 0
    total_revenue_ever: float = 0
    revenue_this_day: float = 0
    projects_completed_this_day: int = 0
    revenue_history: List[float] = field(default_factory=list)
    morale_history: List[float] = field(default_factory=list)
    reputation_history: List[float] = field(default_factory=list)
    competitor_news: List[CompetitorNewsItem] = field(default_factory=list)

    def employee(self, employee_id: str) -> Optional[Employee]:
        return next((e for e in self.employees if e.id == employee_id), None)

    def research_node(self, node_id: str) -> Optional[ResearchNode]:
        return next((n for n in self.research_nodes if n.id == node_id), None)

    def completed_research_count(self) -> int:
        return sum(1 for n in self.research_nodes if n.completed)

    def average_morale(self) -> float:
        if not self.employees:
            return 0.0
        return sum(e.morale for e in self.employees) / len(self.employees)

    def player_market_share(self) -> float:
        return max(0.0, 100.0 - sum(c.market_share for c in self.competitors))

    def to_dict(self, version: str = "1.0") -> Dict[str, Any]:
        """Serialize to the persisted save layout."""
        return {
            "money": self.money,
            "reputation": self.reputation,
            "researchPoints": self.research_points,
            "currentDate": self.current_date.isoformat(),
            "employees": [e.to_dict() for e in self.employees],
            "projects": [p.to_dict() for p in self.projects],
            "researchNodes": [n.to_dict() for n in self.research_nodes],
            "office": self.office.to_dict(),
            "policy": self.policy,
            "unlockedTechnologies": list(self.unlocked_technologies),
            "unlockedProjectTypes": list(self.unlocked_project_types),
            "eventHistory": list(self.event_history),
            "activeEventId": self.active_event_id,
            "unlockedAchievements": list(self.unlocked_achievements),
            "totalProjectsCompleted": self.total_projects_completed,
            "totalContractsCompleted": self.total_contracts_completed,
            "totalTrainingsDone": self.total_trainings_done,
            "totalDailyChallengesCompleted": self.total_daily_challenges_completed,
            "totalWeeklyChallengesCompleted": self.total_weekly_challenges_completed,
            "shippedProducts": [p.to_dict() for p in self.shipped_products],
            "fundingRound": self.funding_round,
            "companyPhase": self.company_phase,
            "dailyChallenge": self.daily_challenge.to_dict() if self.daily_challenge else None,
            "weeklyChallenge": self.weekly_challenge.to_dict() if self.weekly_challenge else None,
            "dailyChallengeProgress": dict(self.daily_challenge_progress),
            "weeklyChallengeProgress": dict(self.weekly_challenge_progress),
            "dailyChallengeDaySeed": self.daily_challenge_day_seed,
            "weeklyChallengeWeekSeed": self.weekly_challenge_week_seed,
            "prestigeLevel": self.prestige_level,
            "legacyPoints": self.legacy_points,
            "daysPlayed": self.days_played,
            "totalRevenueEver": self.total_revenue_ever,
            "revenueThisDay": self.revenue_this_day,
            "projectsCompletedThisDay": self.projects_completed_this_day,
            "competitors": [c.to_dict() for c in self.competitors],
            "competitorNews": [n.to_dict() for n in self.competitor_news],
            "revenueHistory": list(self.revenue_history),
            "moraleHistory": list(self.morale_history),
            "reputationHistory": list(self.reputation_history),
            "version": version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], defaults: "GameState") -> "GameState":
        """
        Rebuild a state from a save payload.

        Any key missing from the payload, or stored as null, takes its value from `defaults`,
        normally a fresh new-game state. Raises KeyError/TypeError/ValueError
        on payloads that cannot be coerced.
        """
        if not isinstance(data, dict):
            raise TypeError("save payload must be a JSON object")

        def get(key, default):
            value = data.get(key)
            return default if value is None else value

        def listed(key, loader, default):
            items = data.get(key)
            if items is None:
                return list(default)
            return [loader(item) for item in items]

        def optional_challenge(key, default):
            if data.get(key) is None:
                return default
            return Challenge.from_dict(data[key])

        return replace(
            defaults,
            money=get("money", defaults.money),
            reputation=get("reputation", defaults.reputation),
            research_points=get("researchPoints", defaults.research_points),
            current_date=parse_date(data.get("currentDate"), defaults.current_date),
            employees=listed("employees", Employee.from_dict, defaults.employees),
            projects=listed("projects", Project.from_dict, defaults.projects),
            research_nodes=listed("researchNodes", ResearchNode.from_dict, defaults.research_nodes),
            office=Office.from_dict(data.get("office") or {}, defaults.office),
            competitors=listed("competitors", Competitor.from_dict, defaults.competitors),
            shipped_products=listed("shippedProducts", ShippedProduct.from_dict, defaults.shipped_products),
            policy=data.get("policy") or defaults.policy,
            unlocked_technologies=list(get("unlockedTechnologies", defaults.unlocked_technologies)),
            unlocked_project_types=list(get("unlockedProjectTypes", defaults.unlocked_project_types)),
            funding_round=get("fundingRound", defaults.funding_round),
            company_phase=get("companyPhase", defaults.company_phase),
            daily_challenge=optional_challenge("dailyChallenge", defaults.daily_challenge),
            weekly_challenge=optional_challenge("weeklyChallenge", defaults.weekly_challenge),
            daily_challenge_progress=dict(get("dailyChallengeProgress", {})),
            weekly_challenge_progress=dict(get("weeklyChallengeProgress", {})),
            daily_challenge_day_seed=get("dailyChallengeDaySeed", defaults.daily_challenge_day_seed),
            weekly_challenge_week_seed=get("weeklyChallengeWeekSeed", defaults.weekly_challenge_week_seed),
            prestige_level=get("prestigeLevel", defaults.prestige_level),
            legacy_points=get("legacyPoints", defaults.legacy_points),
            active_event_id=data.get("activeEventId"),
            event_history=list(get("eventHistory", [])),
            unlocked_achievements=list(get("unlockedAchievements", [])),
            total_projects_completed=get("totalProjectsCompleted", 0),
            total_contracts_completed=get("totalContractsCompleted", 0),
            total_trainings_done=get("totalTrainingsDone", 0),
            total_daily_challenges_completed=get("totalDailyChallengesCompleted", 0),
            total_weekly_challenges_completed=get("totalWeeklyChallengesCompleted", 0),
            days_played=get("daysPlayed", 0),
            total_revenue_ever=get("totalRevenueEver", 0),
            revenue_this_day=get("revenueThisDay", 0),
            projects_completed_this_day=get("projectsCompletedThisDay", 0),
            revenue_history=list(get("revenueHistory", [])),
            morale_history=list(get("moraleHistory", [])),
            reputation_history=list(get("reputationHistory", [])),
            competitor_news=listed("competitorNews", CompetitorNewsItem.from_dict, []),
        )
