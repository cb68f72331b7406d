"""
Daily Simulation Engines

Pure, side-effect free building blocks of a simulated day. Each engine takes
an immutable snapshot (GameState or pieces of it) and returns fresh values;
nothing in this module mutates its inputs or performs I/O.

All stochastic engines take an explicit `rng` callable returning floats in
[0, 1) so tests can drive them with fixed sequences.
"""

import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

from challenges import generate_daily_challenge, generate_weekly_challenge
from config import CONFIG
from content import COMPANY_PHASES, COMPETITOR_ACTIONS, PROJECT_TYPES, get_phase
from events import GameEvent
from models import (
    Challenge,
    Competitor,
    CompetitorNewsItem,
    Employee,
    GameState,
    Notification,
    Office,
    Project,
    ResearchNode,
)
from office_catalog import get_room_type, get_upgrade

RNG = Callable[[], float]


# ---------------------------------------------------------------------------
# Office bonuses
# ---------------------------------------------------------------------------

@dataclass
class Bonuses:
    """Normalized office effects. Multiplier-style fields are fractions (0.15 = +15%)."""
    productivity_bonus: float = 0.0
    morale_bonus: float = 0.0
    research_bonus: float = 0.0
    reputation_bonus: float = 0.0
    capacity_bonus: float = 0.0
    burnout_reduction: float = 0.0
    teamwork_bonus: float = 0.0
    event_bonus: float = 0.0

    def __add__(self, other: "Bonuses") -> "Bonuses":
        return Bonuses(
            productivity_bonus=self.productivity_bonus + other.productivity_bonus,
            morale_bonus=self.morale_bonus + other.morale_bonus,
            research_bonus=self.research_bonus + other.research_bonus,
            reputation_bonus=self.reputation_bonus + other.reputation_bonus,
            capacity_bonus=self.capacity_bonus + other.capacity_bonus,
            burnout_reduction=min(CONFIG.office.burnout_cap, self.burnout_reduction + other.burnout_reduction),
            teamwork_bonus=self.teamwork_bonus + other.teamwork_bonus,
            event_bonus=self.event_bonus + other.event_bonus,
        )


# A bonus source turns an office into one Bonuses aggregate
BonusSource = Callable[[Office], Bonuses]

# Slot upgrade effect keys -> Bonuses fields
_SLOT_EFFECT_FIELDS = {
    "productivity": "productivity_bonus",
    "morale": "morale_bonus",
    "research": "research_bonus",
    "reputation": "reputation_bonus",
    "burnoutReduction": "burnout_reduction",
}

# Room effect keys -> Bonuses fields (capacity handled separately, it never scales)
_ROOM_EFFECT_FIELDS = {
    "productivityBonus": "productivity_bonus",
    "moraleBonus": "morale_bonus",
    "researchBonus": "research_bonus",
    "reputationBonus": "reputation_bonus",
    "burnoutReduction": "burnout_reduction",
    "teamworkBonus": "teamwork_bonus",
    "eventBonus": "event_bonus",
}


def calculate_room_bonuses(office: Office) -> Bonuses:
    """
    Aggregate effects of freely placed rooms.

    Each room scales its type's effects by a level multiplier
    (1 + (level-1) * (upgradeMultiplier-1) for upgradable types) and by
    condition/100. Capacity is summed unscaled; burnout reduction is capped.
    """
    totals = Bonuses()
    cap = CONFIG.office.burnout_cap
    for room in office.rooms:
        room_type = get_room_type(room.type_id)
        if room_type is None:
            continue

        if room_type.upgradable and room_type.upgrade_multiplier:
            level_multiplier = 1 + (room.level - 1) * (room_type.upgrade_multiplier - 1)
        else:
            level_multiplier = 1
        multiplier = level_multiplier * (room.condition / 100)

        for key, value in room_type.effects.items():
            if key == "capacityBonus":
                totals.capacity_bonus += value
            elif key == "burnoutReduction":
                totals.burnout_reduction = min(cap, totals.burnout_reduction + value * multiplier)
            elif key in _ROOM_EFFECT_FIELDS:
                attr = _ROOM_EFFECT_FIELDS[key]
                setattr(totals, attr, getattr(totals, attr) + value * multiplier)
    return totals


def calculate_upgrade_bonuses(office: Office) -> Bonuses:
    """Aggregate effects of slot upgrades. Level 1/2/3 scale by x1.0/1.4/1.8."""
    totals = Bonuses()
    cap = CONFIG.office.burnout_cap
    for installed in office.installed_upgrades:
        upgrade = get_upgrade(installed.upgrade_id)
        if upgrade is None:
            continue

        level_multiplier = 1 + (installed.level - 1) * CONFIG.office.slot_level_step
        for key, value in upgrade.effects.items():
            if key == "capacity":
                totals.capacity_bonus += value
            elif key == "burnoutReduction":
                totals.burnout_reduction = min(cap, totals.burnout_reduction + value * level_multiplier)
            elif key in _SLOT_EFFECT_FIELDS:
                attr = _SLOT_EFFECT_FIELDS[key]
                setattr(totals, attr, getattr(totals, attr) + value * level_multiplier)
    return totals


DEFAULT_BONUS_SOURCES: Sequence[BonusSource] = (calculate_room_bonuses, calculate_upgrade_bonuses)


def compute_combined_bonuses(office: Office, sources: Sequence[BonusSource] = DEFAULT_BONUS_SOURCES) -> Bonuses:
    """Field-wise sum of every bonus source, burnout reduction re-capped."""
    combined = Bonuses()
    for source in sources:
        combined = combined + source(office)
    return combined


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

@dataclass
class ProjectDayResult:
    updated_projects: List[Project]
    completed_projects: List[Project]
    revenue: int
    reputation_gain: int
    new_unlocked_types: List[str]
    morale_deltas_by_employee: Dict[str, float]


def _policy_multiplier(policy: str) -> float:
    cfg = CONFIG.projects
    if policy == "crunch":
        return cfg.crunch_multiplier
    if policy == "wellness":
        return cfg.wellness_multiplier
    return 1.0


def update_projects_for_day(state: GameState, combined: Bonuses, room_bonuses: Bonuses) -> ProjectDayResult:
    """
    Advance every active project by one day.

    Projects without any staffed team member are returned unchanged.
    Completion fires once, on the day progress first reaches max_progress;
    the completed project leaves the active list and pays out revenue and
    reputation.
    """
    cfg = CONFIG.projects
    employees_by_id = {e.id: e for e in state.employees}

    updated: List[Project] = []
    completed: List[Project] = []
    revenue = 0
    reputation_gain = 0
    new_unlocked_types: List[str] = []
    morale_deltas: Dict[str, float] = {}

    for project in state.projects:
        # A repeated id still counts once
        team = [employees_by_id[eid] for eid in dict.fromkeys(project.team) if eid in employees_by_id]
        if not team:
            updated.append(project)
            continue

        size = len(team)
        total_dev = sum(e.skills["development"] for e in team)
        total_res = sum(e.skills["research"] for e in team)
        total_cre = sum(e.skills["creativity"] for e in team)
        total_mgmt = sum(e.skills["management"] for e in team)
        avg_morale = sum(e.morale for e in team) / size
        avg_mgmt = total_mgmt / size

        base_output = total_dev * cfg.development_weight + total_mgmt * cfg.management_weight
        gain = max(1, math.floor(base_output / size))

        morale_multiplier = cfg.morale_floor_multiplier + (avg_morale / 100) * cfg.morale_span_multiplier
        gain = math.floor(gain * morale_multiplier)
        gain = math.floor(gain * _policy_multiplier(state.policy))

        if avg_morale < cfg.low_morale_threshold:
            gain = max(1, math.floor(gain * cfg.low_morale_penalty))

        gain = math.floor(gain * (1 + state.office.upgrades.get("computers", 0) * cfg.computer_bonus))
        if combined.productivity_bonus:
            gain = math.floor(gain * (1 + combined.productivity_bonus))
        if room_bonuses.teamwork_bonus and size > 1:
            gain = math.floor(gain * (1 + room_bonuses.teamwork_bonus))

        if project.complexity in ("complex", "revolutionary"):
            gain += math.floor(total_res / size / 2)

        quality_gain = min(
            cfg.max_daily_quality_gain,
            (total_cre / size + (total_res / size) * cfg.quality_research_weight) / cfg.quality_divisor,
        )
        new_progress = min(project.progress + gain, project.max_progress)
        new_quality = min(cfg.max_quality, project.quality + quality_gain)

        for emp in team:
            if emp.morale <= 0:
                continue
            change = cfg.base_morale_drift + (emp.morale / 100) * cfg.morale_momentum - (avg_mgmt / 100) * cfg.management_relief
            if state.policy == "crunch":
                change -= cfg.crunch_morale_penalty * (1 - combined.burnout_reduction)
            elif state.policy == "wellness":
                change += cfg.wellness_morale_gain
            current = morale_deltas.get(emp.id, 0.0)
            clamped = max(0.0, min(100.0, emp.morale + current + change))
            morale_deltas[emp.id] = clamped - emp.morale

        if new_progress >= project.max_progress and project.progress < project.max_progress:
            completed.append(replace(project, quality=new_quality))
            revenue += math.floor(
                project.market_appeal * cfg.revenue_per_appeal * (new_quality / 10) * (1 + size * cfg.team_revenue_bonus)
            )
            reputation_gain += math.floor(
                new_quality * cfg.quality_reputation_weight + project.market_appeal + size * cfg.team_reputation_bonus
            )
            if project.complexity == "revolutionary" and "agi" not in state.unlocked_project_types \
                    and "agi" not in new_unlocked_types:
                new_unlocked_types.append("agi")
            continue

        updated.append(replace(project, progress=new_progress, quality=new_quality))

    return ProjectDayResult(
        updated_projects=updated,
        completed_projects=completed,
        revenue=revenue,
        reputation_gain=reputation_gain,
        new_unlocked_types=new_unlocked_types,
        morale_deltas_by_employee=morale_deltas,
    )


def unlockable_project_types(unlocked_types: Iterable[str], technologies: Iterable[str]) -> List[str]:
    """Project types whose required tech is all researched but are not yet unlocked."""
    known = set(unlocked_types)
    tech = set(technologies)
    return [
        pt.id for pt in PROJECT_TYPES
        if pt.id not in known and pt.required_tech and set(pt.required_tech) <= tech
    ]


# ---------------------------------------------------------------------------
# Research
# ---------------------------------------------------------------------------

@dataclass
class ResearchDayResult:
    research_nodes: List[ResearchNode]
    newly_completed_research: List[str]


def update_research_for_day(state: GameState, bonuses: Bonuses) -> ResearchDayResult:
    """
    Advance started research nodes by one day.

    Nothing moves without at least one researcher on staff. Unlock fan-out
    is computed from the post-update completed set so iteration order never
    matters.
    """
    role = CONFIG.research.researcher_role
    has_researcher = any(e.role == role for e in state.employees)

    nodes: List[ResearchNode] = []
    for node in state.research_nodes:
        if not node.unlocked or node.completed or node.progress == 0 or not has_researcher:
            nodes.append(node)
            continue

        gain = CONFIG.research.base_daily_gain
        if bonuses.research_bonus:
            gain = max(1, math.floor(gain * (1 + bonuses.research_bonus)))
        progress = node.progress + gain
        if progress >= node.time_required:
            nodes.append(replace(node, progress=node.time_required, completed=True))
        else:
            nodes.append(replace(node, progress=progress))

    known = set(state.unlocked_technologies)
    newly_completed: List[str] = []
    to_unlock: Set[str] = set()
    for node in nodes:
        if node.completed and node.id not in known:
            newly_completed.append(node.id)
            to_unlock.update(node.unlocks)

    nodes = [replace(n, unlocked=True) if n.id in to_unlock and not n.unlocked else n for n in nodes]
    return ResearchDayResult(research_nodes=nodes, newly_completed_research=newly_completed)


# ---------------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------------

@dataclass
class FinanceResult:
    passive_income: int
    total_revenue: float
    daily_expenses: float
    new_money: float
    is_first_of_month: bool


def calculate_daily_finance(state: GameState, new_date: date, project_revenue: float) -> FinanceResult:
    """
    Passive income plus project revenue, minus monthly bills.

    Salaries and rent are charged only when the new date is the first of a
    month. new_money is not clamped here.
    """
    phase = get_phase(state.company_phase)
    multiplier = (phase.passive_income_bonus if phase else None) or 1
    passive_income = math.floor(sum(p.daily_revenue for p in state.shipped_products) * multiplier)
    total_revenue = project_revenue + passive_income

    is_first_of_month = new_date.day == 1
    expenses = 0
    if is_first_of_month:
        expenses = sum(e.salary for e in state.employees) + state.office.rent

    return FinanceResult(
        passive_income=passive_income,
        total_revenue=total_revenue,
        daily_expenses=expenses,
        new_money=state.money - expenses + total_revenue,
        is_first_of_month=is_first_of_month,
    )


# ---------------------------------------------------------------------------
# Morale
# ---------------------------------------------------------------------------

def apply_employee_morale_for_day(
    employees: List[Employee],
    deltas_by_employee: Dict[str, float],
    office: Office,
    combined: Bonuses,
    rng: RNG,
) -> List[Employee]:
    """
    Apply project morale deltas and office perks, clamped to [0, 100].

    Employees who quit through the low-morale hook are left out of the
    returned list. The hook only draws from rng when it is configured.
    """
    cfg = CONFIG.morale
    coffee = office.upgrades.get("coffeeMachines", 0)
    nap_pods = office.upgrades.get("napPods", 0)

    result: List[Employee] = []
    for emp in employees:
        morale = emp.morale + deltas_by_employee.get(emp.id, 0)
        if coffee > 0:
            morale = min(cfg.max_morale, morale + coffee * cfg.coffee_bonus)
        if nap_pods > 0 and morale < cfg.nap_pod_threshold:
            morale = min(cfg.max_morale, morale + nap_pods * cfg.nap_pod_bonus)
        if combined.morale_bonus:
            morale = min(cfg.max_morale, morale + combined.morale_bonus)
        morale = max(cfg.min_morale, min(cfg.max_morale, morale))

        if cfg.quit_morale_threshold is not None and morale < cfg.quit_morale_threshold:
            if rng() < cfg.quit_chance:
                continue

        result.append(replace(emp, morale=morale))
    return result


# ---------------------------------------------------------------------------
# Competitors
# ---------------------------------------------------------------------------

@dataclass
class CompetitorDayResult:
    competitors: List[Competitor]
    news: List[CompetitorNewsItem]


def evolve_competitors(competitors: List[Competitor], days_played: int, rng: RNG) -> CompetitorDayResult:
    """
    Random-walk every rival's share, occasionally firing a catalog action.

    Per rival the rng is drawn for the walk, then for the action roll, then
    (only when the roll hits) for the action pick.
    """
    cfg = CONFIG.competitors
    news: List[CompetitorNewsItem] = []
    evolved: List[Competitor] = []

    for rival in competitors:
        share = rival.market_share + (rng() - 0.5) * cfg.walk_amplitude
        reputation = rival.reputation
        activity = list(rival.recent_activity)

        if rng() < cfg.action_chance:
            action = COMPETITOR_ACTIONS[math.floor(rng() * len(COMPETITOR_ACTIONS))]
            headline = action.headline.replace("{name}", rival.name)
            share += action.share_boost
            reputation = max(cfg.min_reputation, min(cfg.max_reputation, reputation + action.rep_boost))
            activity.insert(0, headline)
            del activity[cfg.activity_length:]
            news.append(CompetitorNewsItem(day=days_played, competitor=rival.name, headline=headline, icon=action.icon))

        share = max(cfg.min_share, min(cfg.max_share, share))
        evolved.append(replace(rival, market_share=share, reputation=reputation, recent_activity=activity))

    total = sum(r.market_share for r in evolved)
    if total > cfg.total_share_cap:
        evolved = [replace(r, market_share=r.market_share / total * cfg.total_share_cap) for r in evolved]

    return CompetitorDayResult(competitors=evolved, news=news)


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------

@dataclass
class ChallengeDayInput:
    daily_challenge: Optional[Challenge]
    weekly_challenge: Optional[Challenge]
    daily_progress: Dict[str, float]
    weekly_progress: Dict[str, float]
    days_played: int
    completed_projects: int
    total_revenue: float
    avg_morale: float
    completed_research: int


@dataclass
class ChallengeDayResult:
    daily_challenge: Challenge
    weekly_challenge: Challenge
    daily_progress: Dict[str, float]
    weekly_progress: Dict[str, float]
    daily_seed: int
    weekly_seed: int
    challenge_money: float = 0
    challenge_reputation: float = 0
    challenge_legacy: float = 0
    daily_completed: bool = False
    weekly_completed: bool = False
    completed_daily: Optional[Challenge] = None
    completed_weekly: Optional[Challenge] = None


def _accumulate(progress: Dict[str, float], inp: ChallengeDayInput) -> Dict[str, float]:
    updated = dict(progress)
    updated["complete_projects"] = updated.get("complete_projects", 0) + inp.completed_projects
    updated["earn_money"] = updated.get("earn_money", 0) + inp.total_revenue
    updated["complete_research"] = updated.get("complete_research", 0) + inp.completed_research
    # Peak, not cumulative
    updated["reach_morale"] = max(updated.get("reach_morale", 0), inp.avg_morale)
    return updated


def update_challenges_for_day(inp: ChallengeDayInput) -> ChallengeDayResult:
    """
    Fold one day of activity into the daily and weekly challenges.

    The daily challenge is checked every day and regenerated only when
    completed. The weekly challenge is checked only when the day crosses a
    week boundary and is regenerated on that boundary whether or not it was
    met. Missing challenges are generated immediately.
    """
    week_length = CONFIG.time.days_per_week
    new_days = inp.days_played + 1
    current_week = inp.days_played // week_length
    next_week = new_days // week_length

    daily_progress = _accumulate(inp.daily_progress, inp)
    weekly_progress = _accumulate(inp.weekly_progress, inp)

    result = ChallengeDayResult(
        daily_challenge=inp.daily_challenge,
        weekly_challenge=inp.weekly_challenge,
        daily_progress=daily_progress,
        weekly_progress=weekly_progress,
        daily_seed=new_days,
        weekly_seed=next_week,
    )

    daily = inp.daily_challenge
    if daily is None:
        result.daily_challenge = generate_daily_challenge(new_days)
    elif daily_progress.get(daily.goal_type, 0) >= daily.target:
        result.challenge_money += daily.reward_money
        result.challenge_reputation += daily.reward_reputation
        result.daily_completed = True
        result.completed_daily = replace(daily, completed=True)
        result.daily_challenge = generate_daily_challenge(new_days)
        result.daily_progress = {}

    weekly = inp.weekly_challenge
    if weekly is None:
        result.weekly_challenge = generate_weekly_challenge(next_week)
    elif next_week > current_week:
        if weekly_progress.get(weekly.goal_type, 0) >= weekly.target:
            result.challenge_money += weekly.reward_money
            result.challenge_reputation += weekly.reward_reputation
            result.challenge_legacy += weekly.reward_legacy
            result.weekly_completed = True
            result.completed_weekly = replace(weekly, completed=True)
        result.weekly_challenge = generate_weekly_challenge(next_week)
        result.weekly_progress = {}

    return result


# ---------------------------------------------------------------------------
# Company phases
# ---------------------------------------------------------------------------

@dataclass
class PhaseTransition:
    next_phase: str
    phase_rep_bonus: float = 0
    phase_name: Optional[str] = None


def compute_phase_transition(
    current_phase: str,
    money: float,
    reputation: float,
    employee_count: int,
    total_projects_completed: int,
    completed_today: int,
    research_completed_count: int,
) -> PhaseTransition:
    """Check only the phase right after current_phase; never skips ahead."""
    ids = [phase.id for phase in COMPANY_PHASES]
    if current_phase not in ids:
        return PhaseTransition(next_phase=current_phase)
    index = ids.index(current_phase)
    if index >= len(ids) - 1:
        return PhaseTransition(next_phase=current_phase)

    nxt = COMPANY_PHASES[index + 1]
    met = (
        (nxt.money is None or money >= nxt.money)
        and (nxt.reputation is None or reputation >= nxt.reputation)
        and (nxt.employees is None or employee_count >= nxt.employees)
        and (nxt.projects_completed is None
             or total_projects_completed + completed_today >= nxt.projects_completed)
        and (nxt.research_completed is None or research_completed_count >= nxt.research_completed)
    )
    if not met:
        return PhaseTransition(next_phase=current_phase)
    return PhaseTransition(next_phase=nxt.id, phase_rep_bonus=nxt.reputation_gain, phase_name=nxt.name)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass
class EventPick:
    event_triggered: bool = False
    event: Optional[GameEvent] = None


def pick_random_event(
    active_event: Optional[GameEvent],
    event_history: List[str],
    catalog: Sequence[GameEvent],
    state: GameState,
    rng: RNG,
) -> EventPick:
    """
    Roll for a narrative event, then pick one by weighted roulette.

    Trigger conditions are evaluated against `state`. Candidates keep
    catalog order, which decides ties.
    """
    if active_event is not None:
        return EventPick()
    if rng() >= CONFIG.events.daily_trigger_chance:
        return EventPick()

    seen = set(event_history)
    candidates = [e for e in catalog if e.id not in seen and e.is_eligible(state)]
    if not candidates:
        return EventPick()

    remaining = rng() * sum(e.probability for e in candidates)
    for event in candidates:
        remaining -= event.probability
        if remaining <= 0:
            return EventPick(event_triggered=True, event=event)
    return EventPick()


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

def project_completion_notifications(projects: List[Project]) -> List[Notification]:
    notes = []
    for project in projects:
        payout = math.floor(project.market_appeal * 1000 * (project.quality / 10))
        notes.append(Notification(f'"{project.name}" completed! +${payout:,}', "success", 4000))
    return notes


def challenge_notifications(result: ChallengeDayResult) -> List[Notification]:
    notes = []
    if result.daily_completed and result.completed_daily:
        notes.append(Notification(
            f"Daily challenge completed! +${result.completed_daily.reward_money:,.0f}", "success", 3000))
    if result.weekly_completed and result.completed_weekly:
        notes.append(Notification(
            f"Weekly challenge completed! +${result.completed_weekly.reward_money:,.0f}", "success", 4000))
    return notes


def phase_notification(phase_name: Optional[str]) -> Optional[Notification]:
    if not phase_name:
        return None
    return Notification(f"Company phase: {phase_name}!", "success", 5000)
