"""
Achievement catalog.

Every achievement is a predicate over the live GameState. Thresholds come
from each achievement's description.
"""

from dataclasses import dataclass
from typing import Callable, List

from content import PHASE_ORDER
from models import GameState
from office_catalog import ROOM_TYPES


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    condition: Callable[[GameState], bool]


def _phase_at_least(state: GameState, phase_id: str) -> bool:
    return PHASE_ORDER.index(state.company_phase) >= PHASE_ORDER.index(phase_id)


def _room_types(state: GameState) -> set:
    return {room.type_id for room in state.office.rooms}


def _has_room(type_id: str) -> Callable[[GameState], bool]:
    return lambda s: type_id in _room_types(s)


ACHIEVEMENTS: List[Achievement] = [
    Achievement("first-hire", "Founding Team", "Hire your first employee", lambda s: len(s.employees) >= 1),
    Achievement("first-project", "Ship It", "Start your first project",
                lambda s: bool(s.projects) or s.total_projects_completed > 0),
    Achievement("first-completion", "It Works!", "Complete your first project",
                lambda s: s.total_projects_completed >= 1),
    Achievement("100k", "Six Figures", "Reach $100,000", lambda s: s.money >= 100_000),
    Achievement("500k", "Half a Million", "Reach $500,000", lambda s: s.money >= 500_000),
    Achievement("millionaire", "Millionaire", "Reach $1,000,000", lambda s: s.money >= 1_000_000),
    Achievement("team-5", "Small Team", "Have 5 employees", lambda s: len(s.employees) >= 5),
    Achievement("team-10", "Growing Team", "Have 10 employees", lambda s: len(s.employees) >= 10),
    Achievement("team-leader", "Team Leader", "Have 20 employees", lambda s: len(s.employees) >= 20),
    Achievement("reputation-50", "Rising Star", "Reach 50 reputation", lambda s: s.reputation >= 50),
    Achievement("reputation-100", "Industry Leader", "Reach 100 reputation", lambda s: s.reputation >= 100),
    Achievement("research-first", "Eureka", "Complete your first research",
                lambda s: s.completed_research_count() >= 1),
    Achievement("research-master", "Research Master", "Complete all research nodes",
                lambda s: bool(s.research_nodes) and all(n.completed for n in s.research_nodes)),
    Achievement("office-upgrade", "Moving Up", "Upgrade your office size", lambda s: s.office.size != "hacker_den"),
    Achievement("contract-master", "Contract Master", "Complete 5 contracts",
                lambda s: s.total_contracts_completed >= 5),
    Achievement("training-expert", "Training Expert", "Train 10 employees",
                lambda s: s.total_trainings_done >= 10),
    Achievement("first-product", "Product Launch", "Ship your first product",
                lambda s: len(s.shipped_products) >= 1),
    Achievement("five-products", "Product Portfolio", "Ship 5 products", lambda s: len(s.shipped_products) >= 5),
    Achievement("daily-challenge", "Daily Grind", "Complete a daily challenge",
                lambda s: s.total_daily_challenges_completed >= 1),
    Achievement("weekly-challenge", "Weekly Warrior", "Complete a weekly challenge",
                lambda s: s.total_weekly_challenges_completed >= 1),
    Achievement("phase-growth", "Traction", "Reach Growth Stage company phase",
                lambda s: _phase_at_least(s, "growth")),
    Achievement("phase-unicorn", "Unicorn", "Reach Unicorn company phase", lambda s: _phase_at_least(s, "unicorn")),
    Achievement("phase-legend", "Legend", "Reach Legend company phase", lambda s: _phase_at_least(s, "legend")),
    Achievement("days-30", "First Month", "Play for 30 days", lambda s: s.days_played >= 30),
    Achievement("days-100", "Centurion", "Play for 100 days", lambda s: s.days_played >= 100),
    Achievement("projects-50", "Prolific", "Complete 50 projects", lambda s: s.total_projects_completed >= 50),
    Achievement("revenue-1m", "Revenue Machine", "Earn $1M total revenue",
                lambda s: s.total_revenue_ever >= 1_000_000),
    Achievement("prestige", "Second Act", "Prestige once", lambda s: s.prestige_level >= 1),
    Achievement("legacy-100", "Legacy", "Accumulate 100 Legacy Points", lambda s: s.legacy_points >= 100),
    Achievement("first-room", "Interior Designer", "Place your first room", lambda s: len(s.office.rooms) >= 1),
    Achievement("rooms-5", "Office Planner", "Place 5 rooms", lambda s: len(s.office.rooms) >= 5),
    Achievement("rooms-10", "Architect", "Place 10 rooms", lambda s: len(s.office.rooms) >= 10),
    Achievement("rooms-20", "Master Builder", "Place 20 rooms", lambda s: len(s.office.rooms) >= 20),
    Achievement("room-upgrade", "Renovator", "Upgrade a room to level 2",
                lambda s: any(r.level >= 2 for r in s.office.rooms)),
    Achievement("room-max-level", "Perfectionist", "Upgrade a room to level 3",
                lambda s: any(r.level >= 3 for r in s.office.rooms)),
    Achievement("room-dev-pit", "Code Cave", "Build a Dev Pit", _has_room("dev_pit")),
    Achievement("room-server", "Server Farm", "Build a Server Room", _has_room("server_room")),
    Achievement("room-gym", "Healthy Team", "Build a Fitness Center", _has_room("gym")),
    Achievement("room-exec", "Corner Office", "Build an Executive Office", _has_room("exec_office")),
    Achievement("room-game", "Play Hard", "Build a Game Room", _has_room("game_room")),
    Achievement("room-variety", "Variety", "Have 5 different room types", lambda s: len(_room_types(s)) >= 5),
    Achievement("room-all-types", "Completionist", "Build every room type at least once",
                lambda s: _room_types(s) >= {rt.id for rt in ROOM_TYPES}),
    Achievement("campus-full", "Campus Life", "Reach Campus size with 20+ rooms",
                lambda s: s.office.size == "campus" and len(s.office.rooms) >= 20),
]


def newly_unlocked(state: GameState) -> List[Achievement]:
    """Achievements whose condition holds now but are not yet recorded."""
    seen = set(state.unlocked_achievements)
    return [a for a in ACHIEVEMENTS if a.id not in seen and a.condition(state)]
