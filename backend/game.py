"""
AI Lab Game Session

advance_day() is the pure daily orchestrator: it sequences the engines in a
fixed order over one GameState snapshot and returns a fresh snapshot plus
the notifications and effect cues the day produced.

Game owns the canonical state for one run. It is the single writer: the
clock loop calls advance_day() on it, and every player action validates,
builds a new snapshot and commits it in one assignment.
"""

import logging
import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from achievements import newly_unlocked
from challenges import bump_progress, generate_daily_challenge, generate_weekly_challenge
from config import CONFIG
from content import (
    LEGACY_UPGRADE_COSTS,
    MAX_SKILL,
    OFFICE_RENTS,
    OFFICE_SIZE_COSTS,
    OFFICE_SIZES,
    TRAINING_COSTS,
    TRAINING_SALARY_RAISE,
    get_project_type,
    initial_competitors,
    initial_research_nodes,
)
from engines import (
    DEFAULT_BONUS_SOURCES,
    RNG,
    BonusSource,
    ChallengeDayInput,
    apply_employee_morale_for_day,
    calculate_daily_finance,
    calculate_room_bonuses,
    challenge_notifications,
    compute_combined_bonuses,
    compute_phase_transition,
    evolve_competitors,
    phase_notification,
    pick_random_event,
    project_completion_notifications,
    unlockable_project_types,
    update_challenges_for_day,
    update_projects_for_day,
    update_research_for_day,
)
from events import GAME_EVENTS, GameEvent, get_event
from hiring import generate_candidate
from models import (
    LEGACY_UPGRADES,
    POLICIES,
    Employee,
    GameState,
    InstalledUpgrade,
    Notification,
    Office,
    OfficeRoom,
    Project,
    ShippedProduct,
)
from office_catalog import (
    OFFICE_GRID_SIZES,
    OFFICE_LAYOUTS,
    can_place_room,
    get_room_type,
    get_upgrade,
    meets_size_requirement,
    occupied_cells,
)
from persistence import SaveStore

logger = logging.getLogger(__name__)

NotificationSink = Callable[[Notification], None]
EffectSink = Callable[[str], None]

# Effect cues handed to the effect sink (particles, sounds)
EFFECT_PROJECT_COMPLETE = "project_complete"
EFFECT_CHALLENGE_COMPLETE = "challenge_complete"
EFFECT_PHASE_UP = "phase_up"
EFFECT_EVENT = "event"
EFFECT_ACHIEVEMENT = "achievement"


@dataclass
class DayOutcome:
    """Everything one simulated day produced."""
    state: GameState
    notifications: List[Notification] = field(default_factory=list)
    effects: List[str] = field(default_factory=list)
    completed_projects: List[Project] = field(default_factory=list)
    quit_employee_ids: List[str] = field(default_factory=list)
    event: Optional[GameEvent] = None


def _merge(*groups: Iterable[str]) -> List[str]:
    """Concatenate id lists, keeping first occurrence order."""
    merged: List[str] = []
    for group in groups:
        for item in group:
            if item not in merged:
                merged.append(item)
    return merged


def _tail(history: List[float], value: float) -> List[float]:
    return (list(history) + [value])[-CONFIG.time.history_length:]


def find_event(catalog: Sequence[GameEvent], event_id: Optional[str]) -> Optional[GameEvent]:
    if event_id is None:
        return None
    if catalog is GAME_EVENTS:
        return get_event(event_id)
    return next((e for e in catalog if e.id == event_id), None)


def new_game_state(money: Optional[float] = None) -> GameState:
    """A fresh run: empty team, one Dev Pit and basic desks in a hacker den."""
    width, height, _ = OFFICE_GRID_SIZES["hacker_den"]
    office = Office(
        size="hacker_den",
        rent=OFFICE_RENTS["hacker_den"],
        rooms=[OfficeRoom(id="room-1", type_id="dev_pit", grid_x=0, grid_y=0)],
        grid_width=width,
        grid_height=height,
        installed_upgrades=[InstalledUpgrade(slot_id="main_work", upgrade_id="basic_desks")],
    )
    return GameState(
        money=CONFIG.finance.starting_money if money is None else money,
        current_date=CONFIG.time.start_date,
        research_nodes=initial_research_nodes(),
        office=office,
        competitors=initial_competitors(),
        daily_challenge=generate_daily_challenge(0),
        weekly_challenge=generate_weekly_challenge(0),
    )


def state_from_save(data: dict) -> GameState:
    """
    Rebuild a GameState from a save payload.

    Missing challenges and seeds are regenerated from the saved day count,
    so an old save resumes with the challenges it would have had.
    """
    days_played = (data.get("daysPlayed") or 0) if isinstance(data, dict) else 0
    week = days_played // CONFIG.time.days_per_week
    defaults = replace(
        new_game_state(),
        daily_challenge=generate_daily_challenge(days_played),
        weekly_challenge=generate_weekly_challenge(week),
        daily_challenge_day_seed=days_played,
        weekly_challenge_week_seed=week,
    )
    return GameState.from_dict(data, defaults)


def advance_day(
    state: GameState,
    rng: RNG,
    catalog: Sequence[GameEvent] = GAME_EVENTS,
    bonus_sources: Sequence[BonusSource] = DEFAULT_BONUS_SOURCES,
) -> DayOutcome:
    """
    Advance the world by exactly one day.

    Order: bonuses, projects, research, finance, morale, challenges, phase,
    reputation, competitors, histories, event pick. The input snapshot is
    never modified.
    """
    new_date = state.current_date + timedelta(days=1)

    room_bonuses = calculate_room_bonuses(state.office)
    combined = compute_combined_bonuses(state.office, bonus_sources)

    project_day = update_projects_for_day(state, combined, room_bonuses)
    research_day = update_research_for_day(state, combined)

    technologies = _merge(state.unlocked_technologies, research_day.newly_completed_research)
    research_types = unlockable_project_types(state.unlocked_project_types, technologies)

    finance = calculate_daily_finance(state, new_date, project_day.revenue)
    employees = apply_employee_morale_for_day(
        state.employees, project_day.morale_deltas_by_employee, state.office, combined, rng,
    )

    remaining = {e.id for e in employees}
    quit_ids = [e.id for e in state.employees if e.id not in remaining]
    projects = project_day.updated_projects
    if quit_ids:
        projects = [replace(p, team=[m for m in p.team if m in remaining]) for p in projects]

    unlocked_types = _merge(state.unlocked_project_types, project_day.new_unlocked_types, research_types)
    avg_morale = sum(e.morale for e in employees) / len(employees) if employees else 0

    challenges = update_challenges_for_day(ChallengeDayInput(
        daily_challenge=state.daily_challenge,
        weekly_challenge=state.weekly_challenge,
        daily_progress=state.daily_challenge_progress,
        weekly_progress=state.weekly_challenge_progress,
        days_played=state.days_played,
        completed_projects=len(project_day.completed_projects),
        total_revenue=finance.total_revenue,
        avg_morale=avg_morale,
        completed_research=len(research_day.newly_completed_research),
    ))

    money = max(0, finance.new_money) + challenges.challenge_money
    reputation_so_far = state.reputation + project_day.reputation_gain + challenges.challenge_reputation
    phase = compute_phase_transition(
        state.company_phase,
        money,
        reputation_so_far,
        len(employees),
        state.total_projects_completed,
        len(project_day.completed_projects),
        sum(1 for n in research_day.research_nodes if n.completed),
    )
    reputation = reputation_so_far + phase.phase_rep_bonus + combined.reputation_bonus

    days_played = state.days_played + 1
    rivals = evolve_competitors(state.competitors, days_played, rng)
    news = (rivals.news + list(state.competitor_news))[:CONFIG.time.news_feed_length]

    new_state = replace(
        state,
        current_date=new_date,
        money=money,
        reputation=reputation,
        employees=employees,
        projects=projects,
        research_nodes=research_day.research_nodes,
        unlocked_technologies=technologies,
        unlocked_project_types=unlocked_types,
        total_projects_completed=state.total_projects_completed + len(project_day.completed_projects),
        total_revenue_ever=state.total_revenue_ever + finance.total_revenue,
        revenue_this_day=finance.total_revenue,
        projects_completed_this_day=len(project_day.completed_projects),
        days_played=days_played,
        daily_challenge=challenges.daily_challenge,
        weekly_challenge=challenges.weekly_challenge,
        daily_challenge_progress=challenges.daily_progress,
        weekly_challenge_progress=challenges.weekly_progress,
        daily_challenge_day_seed=challenges.daily_seed,
        weekly_challenge_week_seed=challenges.weekly_seed,
        company_phase=phase.next_phase,
        competitors=rivals.competitors,
        competitor_news=news,
        legacy_points=state.legacy_points + challenges.challenge_legacy,
        total_daily_challenges_completed=state.total_daily_challenges_completed + int(challenges.daily_completed),
        total_weekly_challenges_completed=state.total_weekly_challenges_completed + int(challenges.weekly_completed),
        revenue_history=_tail(state.revenue_history, finance.total_revenue),
        morale_history=_tail(state.morale_history, avg_morale),
        reputation_history=_tail(state.reputation_history, reputation),
    )

    outcome = DayOutcome(
        state=new_state,
        completed_projects=project_day.completed_projects,
        quit_employee_ids=quit_ids,
    )
    outcome.notifications.extend(project_completion_notifications(project_day.completed_projects))
    if project_day.completed_projects:
        outcome.effects.append(EFFECT_PROJECT_COMPLETE)
    outcome.notifications.extend(challenge_notifications(challenges))
    if challenges.daily_completed or challenges.weekly_completed:
        outcome.effects.append(EFFECT_CHALLENGE_COMPLETE)
    phase_note = phase_notification(phase.phase_name)
    if phase_note:
        outcome.notifications.append(phase_note)
        outcome.effects.append(EFFECT_PHASE_UP)
    for employee_id in quit_ids:
        name = state.employee(employee_id).name
        outcome.notifications.append(Notification(f"{name} quit after weeks of low morale", "warning", 4000))

    active = find_event(catalog, new_state.active_event_id)
    pick = pick_random_event(active, new_state.event_history, catalog, new_state, rng)
    if pick.event_triggered:
        outcome.state = replace(new_state, active_event_id=pick.event.id)
        outcome.event = pick.event
        outcome.effects.append(EFFECT_EVENT)

    return outcome


def apply_achievements(state: GameState):
    """Record achievements that hold now. Returns (state, notifications)."""
    unlocked = newly_unlocked(state)
    if not unlocked:
        return state, []
    state = replace(state, unlocked_achievements=state.unlocked_achievements + [a.id for a in unlocked])
    return state, [Notification(f"Achievement unlocked: {a.name}!", "info", 4000) for a in unlocked]


class Game:
    """
    One company run.

    Holds the canonical GameState plus the clock gating (pause and speed,
    which are session settings and never persisted). Actions return True on
    success; rejected actions leave the state untouched, return False and
    emit an error notification.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        rng: Optional[RNG] = None,
        store: Optional[SaveStore] = None,
        notification_sink: Optional[NotificationSink] = None,
        effect_sink: Optional[EffectSink] = None,
        event_catalog: Sequence[GameEvent] = GAME_EVENTS,
    ):
        self.state = state if state is not None else new_game_state()
        self.rng: RNG = rng if rng is not None else np.random.default_rng(CONFIG.seed).random
        self.store = store
        self.notification_sink = notification_sink
        self.effect_sink = effect_sink
        self.event_catalog = event_catalog

        self.is_paused = True
        self.game_speed = 1

        # Undelivered notifications, drained by the transport layer
        self.notifications: List[Notification] = []

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def notify(self, message: str, type: str = "info", duration: int = 3000) -> None:
        self._emit(Notification(message, type, duration))

    def _emit(self, notification: Notification) -> None:
        self.notifications.append(notification)
        if self.notification_sink is not None:
            self.notification_sink(notification)

    def _effect(self, effect: str) -> None:
        if self.effect_sink is not None:
            self.effect_sink(effect)

    def _reject(self, message: str) -> bool:
        logger.info(f"Action rejected: {message}")
        self.notify(message, "error")
        return False

    def _commit(self, state: GameState) -> None:
        state, notes = apply_achievements(state)
        self.state = state
        for note in notes:
            self._emit(note)
        if notes:
            self._effect(EFFECT_ACHIEVEMENT)

    def drain_notifications(self) -> List[Notification]:
        notes, self.notifications = self.notifications, []
        return notes

    def active_event(self) -> Optional[GameEvent]:
        return find_event(self.event_catalog, self.state.active_event_id)

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def advance_day(self) -> Optional[DayOutcome]:
        """Advance one day unless paused. Returns None when paused."""
        if self.is_paused:
            return None

        previous_phase = self.state.company_phase
        outcome = advance_day(self.state, self.rng, self.event_catalog)
        self._commit(outcome.state)
        outcome.state = self.state

        for note in outcome.notifications:
            self._emit(note)
        for effect in outcome.effects:
            self._effect(effect)

        if outcome.state.company_phase != previous_phase:
            logger.info(f"Company reached phase {outcome.state.company_phase} on day {outcome.state.days_played}")
        for project in outcome.completed_projects:
            logger.info(f"Project completed: {project.name} (quality {project.quality:.2f})")
        if outcome.event is not None:
            logger.info(f"Event triggered: {outcome.event.id}")
        return outcome

    def set_game_speed(self, speed: int) -> bool:
        if speed not in CONFIG.time.allowed_speeds:
            return self._reject(f"Unsupported game speed: {speed}")
        self.game_speed = speed
        self.is_paused = speed == 0
        return True

    def toggle_pause(self) -> bool:
        self.is_paused = not self.is_paused
        return self.is_paused

    def set_policy(self, policy: str) -> bool:
        if policy not in POLICIES:
            return self._reject(f"Unknown policy: {policy}")
        self._commit(replace(self.state, policy=policy))
        return True

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def add_money(self, amount: float) -> None:
        self._commit(replace(self.state, money=self.state.money + amount))

    def spend_money(self, amount: float) -> bool:
        """Deduct amount if affordable. Emits nothing; callers report."""
        if self.state.money < amount:
            return False
        self._commit(replace(self.state, money=self.state.money - amount))
        return True

    def add_reputation(self, amount: float) -> None:
        self._commit(replace(self.state, reputation=self.state.reputation + amount))

    def add_legacy_points(self, amount: float) -> None:
        self._commit(replace(self.state, legacy_points=self.state.legacy_points + amount))

    def _bump(self, state: GameState, goal_type: str) -> GameState:
        return replace(
            state,
            daily_challenge_progress=bump_progress(state.daily_challenge_progress, goal_type),
            weekly_challenge_progress=bump_progress(state.weekly_challenge_progress, goal_type),
        )

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    def hire_employee(self, employee: Optional[Employee] = None) -> bool:
        """Add an employee, or a random candidate when none is given."""
        if employee is None:
            employee = generate_candidate(self.rng)
        if self.state.employee(employee.id) is not None:
            return self._reject(f"Employee already exists: {employee.id}")

        state = replace(self.state, employees=self.state.employees + [employee])
        self._commit(self._bump(state, "hire_employees"))
        self.notify(f"{employee.name} joined as {employee.role}", "success")
        return True

    def fire_employee(self, employee_id: str) -> bool:
        employee = self.state.employee(employee_id)
        if employee is None:
            return self._reject(f"No employee with id {employee_id}")

        projects = [
            replace(p, team=[m for m in p.team if m != employee_id]) if employee_id in p.team else p
            for p in self.state.projects
        ]
        self._commit(replace(
            self.state,
            employees=[e for e in self.state.employees if e.id != employee_id],
            projects=projects,
        ))
        self.notify(f"{employee.name} has left the company", "info")
        return True

    def train_employee(self, employee_id: str, skill: str) -> bool:
        employee = self.state.employee(employee_id)
        if employee is None:
            return self._reject(f"No employee with id {employee_id}")
        if skill not in TRAINING_COSTS:
            return self._reject(f"Unknown skill: {skill}")
        if employee.skills[skill] >= MAX_SKILL:
            return self._reject(f"{employee.name} has already mastered {skill}")
        cost = TRAINING_COSTS[skill]
        if not self.spend_money(cost):
            return self._reject(f"Not enough money! Need ${cost:,.0f}")

        skills = dict(employee.skills)
        skills[skill] = min(MAX_SKILL, skills[skill] + 1)
        trained = replace(employee, skills=skills, salary=math.floor(employee.salary * TRAINING_SALARY_RAISE))
        state = replace(
            self.state,
            employees=[trained if e.id == employee_id else e for e in self.state.employees],
            total_trainings_done=self.state.total_trainings_done + 1,
        )
        self._commit(self._bump(state, "train_employees"))
        self.notify(f"{employee.name} trained in {skill}", "success")
        return True

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def _team_problem(self, team: List[str], project_id: Optional[str] = None) -> Optional[str]:
        """Why these members cannot staff a project, or None. project_id's own team is ignored."""
        assigned = {member for p in self.state.projects if p.id != project_id for member in p.team}
        for member in team:
            employee = self.state.employee(member)
            if employee is None:
                return f"No employee with id {member}"
            if member in assigned:
                return f"{employee.name} is already on a project"
        return None

    def start_project(self, type_id: str, team: List[str], name: Optional[str] = None) -> bool:
        """Pay the type's base cost and start a project with the given team."""
        project_type = get_project_type(type_id)
        if project_type is None:
            return self._reject(f"Unknown project type: {type_id}")
        if type_id not in self.state.unlocked_project_types:
            return self._reject(f"{project_type.name} is not unlocked yet")
        if len(set(team)) != len(team):
            return self._reject("A team member was selected twice")
        if not project_type.min_team_size <= len(team) <= project_type.max_team_size:
            return self._reject(
                f"{project_type.name} needs a team of {project_type.min_team_size}-{project_type.max_team_size}"
            )
        problem = self._team_problem(team)
        if problem:
            return self._reject(problem)

        if not self.spend_money(project_type.base_cost):
            return self._reject(f"Not enough money! Need ${project_type.base_cost:,.0f}")

        project = Project(
            id=f"project-{uuid.uuid4().hex[:12]}",
            name=name or project_type.name,
            type=project_type.id,
            complexity=project_type.complexity,
            progress=0,
            max_progress=project_type.base_time,
            team=list(team),
            quality=project_type.base_quality,
            market_appeal=project_type.market_appeal,
        )
        self._commit(replace(self.state, projects=self.state.projects + [project]))
        self.notify(f'Started "{project.name}"', "info")
        return True

    def update_project(self, project_id: str, **updates) -> bool:
        """Overwrite fields of an active project (snake_case field names)."""
        if not any(p.id == project_id for p in self.state.projects):
            return self._reject(f"No project with id {project_id}")
        if "team" in updates:
            team = list(updates["team"])
            if len(set(team)) != len(team):
                return self._reject("A team member was selected twice")
            problem = self._team_problem(team, project_id)
            if problem:
                return self._reject(problem)
            updates["team"] = team
        try:
            projects = [replace(p, **updates) if p.id == project_id else p for p in self.state.projects]
        except (TypeError, ValueError) as exc:
            return self._reject(f"Invalid project update: {exc}")
        self._commit(replace(self.state, projects=projects))
        return True

    def ship_product(self, name: str, daily_revenue: float) -> bool:
        """Productize something for passive daily income."""
        if not name.strip() or daily_revenue <= 0:
            return self._reject("A product needs a name and positive daily revenue")
        product = ShippedProduct(
            id=f"product-{uuid.uuid4().hex[:12]}",
            name=name.strip(),
            daily_revenue=math.floor(daily_revenue),
            unlocked_at=self.state.current_date.isoformat(),
        )
        state = replace(self.state, shipped_products=self.state.shipped_products + [product])
        self._commit(self._bump(state, "ship_products"))
        self.notify(f"{product.name} shipped! +${product.daily_revenue:,}/day", "success")
        return True

    def complete_contract(self, reward: float = 0) -> bool:
        state = replace(
            self.state,
            money=self.state.money + reward,
            total_contracts_completed=self.state.total_contracts_completed + 1,
        )
        self._commit(self._bump(state, "complete_contracts"))
        self.notify(f"Contract completed! +${reward:,.0f}", "success")
        return True

    # ------------------------------------------------------------------
    # Research
    # ------------------------------------------------------------------

    def start_research(self, node_id: str) -> bool:
        node = self.state.research_node(node_id)
        if node is None:
            return self._reject(f"No research node {node_id}")
        if not node.unlocked:
            return self._reject(f"{node.name} is still locked")
        if node.completed or node.progress > 0:
            return self._reject(f"{node.name} is already underway")
        if not self.spend_money(node.cost):
            return self._reject(f"Not enough money! Need ${node.cost:,.0f}")

        nodes = [replace(n, progress=1) if n.id == node_id else n for n in self.state.research_nodes]
        self._commit(replace(self.state, research_nodes=nodes))
        self.notify(f"Research started: {node.name}", "info")
        return True

    def update_research(self, node_id: str, progress: float) -> bool:
        if self.state.research_node(node_id) is None:
            return self._reject(f"No research node {node_id}")
        nodes = [replace(n, progress=progress) if n.id == node_id else n for n in self.state.research_nodes]
        self._commit(replace(self.state, research_nodes=nodes))
        return True

    def complete_research(self, node_id: str) -> bool:
        """Finish a node immediately and unlock everything it leads to."""
        node = self.state.research_node(node_id)
        if node is None:
            return self._reject(f"No research node {node_id}")

        nodes = []
        for n in self.state.research_nodes:
            if n.id == node_id:
                n = replace(n, completed=True, progress=n.time_required)
            if n.id in node.unlocks:
                n = replace(n, unlocked=True)
            nodes.append(n)
        technologies = _merge(self.state.unlocked_technologies, [node_id])
        types = unlockable_project_types(self.state.unlocked_project_types, technologies)
        self._commit(replace(
            self.state,
            research_nodes=nodes,
            unlocked_technologies=technologies,
            unlocked_project_types=_merge(self.state.unlocked_project_types, types),
        ))
        self.notify(f"Research complete: {node.name}", "success")
        return True

    # ------------------------------------------------------------------
    # Office
    # ------------------------------------------------------------------

    def _set_office(self, office: Office, money: float) -> None:
        self._commit(replace(self.state, office=office, money=money))

    def upgrade_office(self, upgrade: str) -> bool:
        """Buy one legacy per-office counter (computers, coffee machines...)."""
        if upgrade not in LEGACY_UPGRADES:
            return self._reject(f"Unknown office upgrade: {upgrade}")
        cost = LEGACY_UPGRADE_COSTS[upgrade]
        if self.state.money < cost:
            return self._reject(f"Not enough money! Need ${cost:,.0f}")

        office = self.state.office
        upgrades = dict(office.upgrades)
        upgrades[upgrade] = upgrades.get(upgrade, 0) + 1
        self._set_office(replace(office, upgrades=upgrades), self.state.money - cost)
        return True

    def upgrade_office_size(self) -> bool:
        office = self.state.office
        index = OFFICE_SIZES.index(office.size)
        if index >= len(OFFICE_SIZES) - 1:
            return self._reject("You already have the largest office size!")

        next_size = OFFICE_SIZES[index + 1]
        cost = OFFICE_SIZE_COSTS[next_size]
        if self.state.money < cost:
            return self._reject(f"Not enough money! Need ${cost:,.0f} to upgrade to {next_size} office.")

        width, height, _ = OFFICE_GRID_SIZES[next_size]
        self._set_office(
            replace(office, size=next_size, level=office.level + 1, rent=OFFICE_RENTS[next_size],
                    grid_width=width, grid_height=height),
            self.state.money - cost,
        )
        self.notify(f"Moved into a {OFFICE_LAYOUTS[next_size].name}!", "success", 4000)
        return True

    def place_room(self, type_id: str, grid_x: int, grid_y: int) -> bool:
        room_type = get_room_type(type_id)
        office = self.state.office
        if room_type is None:
            return self._reject(f"Unknown room type: {type_id}")
        if self.state.money < room_type.base_cost:
            return self._reject(f"Not enough money! Need ${room_type.base_cost:,.0f}")
        if not meets_size_requirement(office.size, room_type.office_sizes):
            return self._reject(f"Requires {room_type.office_sizes[0]} office or larger")
        if room_type.min_employees and len(self.state.employees) < room_type.min_employees:
            return self._reject(f"Requires at least {room_type.min_employees} employees")
        max_rooms = OFFICE_GRID_SIZES[office.size][2]
        if len(office.rooms) >= max_rooms:
            return self._reject(f"Office is full ({max_rooms} rooms max)")
        if room_type.max_per_office is not None:
            if sum(1 for r in office.rooms if r.type_id == type_id) >= room_type.max_per_office:
                return self._reject(f"Maximum {room_type.max_per_office} {room_type.name}(s) per office")
        if not can_place_room(room_type, grid_x, grid_y, office.grid_width, office.grid_height,
                              occupied_cells(office.rooms)):
            return self._reject("Room does not fit in that location")

        room = OfficeRoom(id=f"room-{uuid.uuid4().hex[:12]}", type_id=type_id, grid_x=grid_x, grid_y=grid_y)
        self._set_office(replace(office, rooms=office.rooms + [room]), self.state.money - room_type.base_cost)
        self.notify(f"{room_type.name} placed!", "success")
        return True

    def remove_room(self, room_id: str) -> bool:
        office = self.state.office
        room = next((r for r in office.rooms if r.id == room_id), None)
        if room is None:
            return self._reject(f"No room with id {room_id}")

        room_type = get_room_type(room.type_id)
        refund = math.floor(room_type.base_cost * CONFIG.office.refund_fraction) if room_type else 0
        self._set_office(
            replace(office, rooms=[r for r in office.rooms if r.id != room_id]),
            self.state.money + refund,
        )
        self.notify(f"Room removed. Refunded ${refund:,}", "info")
        return True

    def upgrade_room(self, room_id: str) -> bool:
        office = self.state.office
        room = next((r for r in office.rooms if r.id == room_id), None)
        if room is None:
            return self._reject(f"No room with id {room_id}")
        room_type = get_room_type(room.type_id)
        if room_type is None or not room_type.upgradable:
            return self._reject("This room cannot be upgraded")
        if room.level >= CONFIG.office.room_max_level:
            return self._reject("Room is already at maximum level")
        cost = math.floor(room_type.base_cost * (room.level * CONFIG.office.room_upgrade_cost_factor))
        if self.state.money < cost:
            return self._reject(f"Not enough money! Need ${cost:,}")

        rooms = [replace(r, level=r.level + 1) if r.id == room_id else r for r in office.rooms]
        self._set_office(replace(office, rooms=rooms), self.state.money - cost)
        self.notify(f"{room_type.name} upgraded to level {room.level + 1}!", "success")
        return True

    def install_upgrade(self, slot_id: str, upgrade_id: str) -> bool:
        office = self.state.office
        layout = OFFICE_LAYOUTS[office.size]
        if slot_id not in layout.slots:
            return self._reject("Invalid slot")
        upgrade = get_upgrade(upgrade_id)
        if upgrade is None:
            return self._reject("Invalid upgrade")
        slot_type = layout.slots[slot_id]
        if upgrade.slot_type != slot_type:
            return self._reject(f"This upgrade doesn't fit in a {slot_type} slot")
        if any(u.slot_id == slot_id for u in office.installed_upgrades):
            return self._reject("Slot already has an upgrade. Remove it first.")
        if self.state.money < upgrade.cost:
            return self._reject(f"Not enough money! Need ${upgrade.cost:,.0f}")
        if not meets_size_requirement(office.size, upgrade.requires_office):
            return self._reject(f"Requires {upgrade.requires_office[0]} office or larger")

        installed = office.installed_upgrades + [InstalledUpgrade(slot_id=slot_id, upgrade_id=upgrade_id)]
        self._set_office(replace(office, installed_upgrades=installed), self.state.money - upgrade.cost)
        self.notify(f"{upgrade.name} installed!", "success")
        return True

    def upgrade_slot(self, slot_id: str) -> bool:
        office = self.state.office
        installed = next((u for u in office.installed_upgrades if u.slot_id == slot_id), None)
        if installed is None:
            return self._reject("No upgrade installed in this slot")
        upgrade = get_upgrade(installed.upgrade_id)
        if upgrade is None:
            return self._reject("Invalid upgrade")
        if installed.level >= upgrade.max_level:
            return self._reject("Already at maximum level")
        cost = math.floor(upgrade.cost * (installed.level * CONFIG.office.slot_upgrade_cost_factor))
        if self.state.money < cost:
            return self._reject(f"Not enough money! Need ${cost:,}")

        upgrades = [replace(u, level=u.level + 1) if u.slot_id == slot_id else u for u in office.installed_upgrades]
        self._set_office(replace(office, installed_upgrades=upgrades), self.state.money - cost)
        self.notify(f"{upgrade.name} upgraded to level {installed.level + 1}!", "success")
        return True

    def remove_slot_upgrade(self, slot_id: str) -> bool:
        office = self.state.office
        installed = next((u for u in office.installed_upgrades if u.slot_id == slot_id), None)
        if installed is None:
            return self._reject("No upgrade installed in this slot")

        upgrade = get_upgrade(installed.upgrade_id)
        refund = math.floor(upgrade.cost * CONFIG.office.refund_fraction) if upgrade else 0
        self._set_office(
            replace(office, installed_upgrades=[u for u in office.installed_upgrades if u.slot_id != slot_id]),
            self.state.money + refund,
        )
        self.notify(f"Upgrade removed. Refunded ${refund:,}", "info")
        return True

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def trigger_event(self, event_id: str) -> bool:
        """Open an event by hand. Refused while another event is open."""
        event = find_event(self.event_catalog, event_id)
        if event is None:
            return self._reject(f"Unknown event: {event_id}")
        if self.state.active_event_id is not None:
            return self._reject("Another event is already in progress")
        if not event.is_eligible(self.state):
            return self._reject(f"{event.title} cannot happen right now")
        self._commit(replace(self.state, active_event_id=event.id))
        self._effect(EFFECT_EVENT)
        return True

    def handle_event_choice(self, event_id: str, choice_id: str) -> bool:
        """Apply the chosen option's effects and close the event."""
        event = self.active_event()
        if event is None or event.id != event_id:
            return self._reject(f"Event {event_id} is not active")
        choice = event.choice(choice_id)
        if choice is None:
            return self._reject(f"Unknown choice {choice_id} for {event_id}")

        effects = choice.effects
        state = self.state
        state = replace(
            state,
            money=state.money + effects.get("money", 0),
            reputation=state.reputation + effects.get("reputation", 0),
            research_points=state.research_points + effects.get("research_points", 0),
            unlocked_technologies=_merge(state.unlocked_technologies, effects.get("unlock_tech", [])),
            unlocked_project_types=_merge(state.unlocked_project_types, effects.get("unlock_project", [])),
        )
        if effects.get("fire_employee") and state.employees:
            leaver = state.employees[math.floor(self.rng() * len(state.employees))]
            state = replace(
                state,
                employees=[e for e in state.employees if e.id != leaver.id],
                projects=[replace(p, team=[m for m in p.team if m != leaver.id]) for p in state.projects],
            )
            self.notify(f"{leaver.name} left for a rival lab", "warning")
        if effects.get("boost_morale"):
            boost = effects["boost_morale"]
            state = replace(
                state,
                employees=[replace(e, morale=max(0, min(100, e.morale + boost))) for e in state.employees],
            )

        self._commit(replace(state, active_event_id=None, event_history=state.event_history + [event_id]))
        logger.info(f"Event {event_id} resolved with {choice_id}")
        return True

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def initialize_game(self) -> None:
        """Start a brand new run (prestige progress is discarded too)."""
        self.state = new_game_state()
        self.is_paused = True
        self.game_speed = 1
        logger.info("New game initialized")

    def prestige_reset(self) -> int:
        """Start over, converting this run's results into legacy points. Returns the gain."""
        cfg = CONFIG.finance
        old = self.state
        legacy_gain = math.floor(
            old.total_projects_completed * cfg.legacy_per_project
            + old.days_played * cfg.legacy_per_day
            + old.total_revenue_ever / cfg.legacy_revenue_divisor
        )
        prestige = old.prestige_level + 1
        bonus = 1 + prestige * cfg.prestige_money_bonus

        self.initialize_game()
        self._commit(replace(
            self.state,
            prestige_level=prestige,
            legacy_points=old.legacy_points + legacy_gain,
            money=math.floor(cfg.starting_money * bonus),
        ))
        self.notify(
            f"Prestige! +{legacy_gain} Legacy. New run with {round((bonus - 1) * 100)}% cash bonus.",
            "success", 6000,
        )
        logger.info(f"Prestige reset to level {prestige} (+{legacy_gain} legacy)")
        return legacy_gain

    def _store(self) -> SaveStore:
        if self.store is None:
            self.store = SaveStore(CONFIG.persistence.db_path)
        return self.store

    def save_game(self) -> bool:
        payload = self.state.to_dict(version=CONFIG.persistence.save_version)
        self._store().save(CONFIG.persistence.storage_key, payload)
        logger.info(f"Game saved on day {self.state.days_played}")
        return True

    def load_game(self) -> bool:
        """Replace the current state with the saved one. False leaves it untouched."""
        payload = self._store().load(CONFIG.persistence.storage_key)
        if payload is None:
            return False
        try:
            state = state_from_save(payload)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error(f"Failed to load game: {exc}")
            return False
        self.state = state
        logger.info(f"Game loaded at day {state.days_played}")
        return True
