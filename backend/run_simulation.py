"""
Run a headless AI lab simulation.

Advances a fresh company for a number of days and prints a progress table
and a final report. With --auto-hire a simple autopilot staffs the lab,
keeps projects and research running and resolves events with their first
choice.
"""

import argparse
import logging
import time
from pathlib import Path
from typing import Optional

import numpy as np

from config import CONFIG
from content import get_project_type
from game import Game, new_game_state
from persistence import init_db, log_day
from stats import compute_company_stats

logger = logging.getLogger(__name__)

TARGET_TEAM_SIZE = 4


def autopilot(game: Game) -> None:
    """One round of simple management decisions."""
    state = game.state

    event = game.active_event()
    if event is not None:
        game.handle_event_choice(event.id, event.choices[0].id)
        state = game.state

    if len(state.employees) < TARGET_TEAM_SIZE and state.money > 50000:
        game.hire_employee()
        state = game.state

    # Keep one research node running once a researcher is on staff
    if any(e.role == CONFIG.research.researcher_role for e in state.employees):
        running = any(n.progress > 0 and not n.completed for n in state.research_nodes)
        if not running:
            available = [n for n in state.research_nodes if n.unlocked and not n.completed and n.progress == 0]
            affordable = [n for n in available if n.cost <= state.money / 2]
            if affordable:
                game.start_research(min(affordable, key=lambda n: n.cost).id)
                state = game.state

    # Staff the best affordable project type with idle employees
    assigned = {m for p in state.projects for m in p.team}
    idle = [e.id for e in state.employees if e.id not in assigned]
    if not idle:
        return
    candidates = []
    for type_id in state.unlocked_project_types:
        project_type = get_project_type(type_id)
        if project_type is None or project_type.base_cost > state.money / 2:
            continue
        if project_type.min_team_size <= len(idle):
            candidates.append(project_type)
    if candidates:
        best = max(candidates, key=lambda pt: pt.market_appeal)
        game.start_project(best.id, idle[:best.max_team_size])


def main(
    num_days: int = 365,
    seed: Optional[int] = None,
    auto_hire: bool = False,
    policy: str = "balanced",
    report_every: int = 30,
    db_path: Optional[str] = None,
):
    """Run the simulation and print a summary."""
    print("=" * 80)
    print(f"AI LAB SIMULATION ({num_days} days, seed={seed})")
    print("=" * 80)
    print()

    game = Game(state=new_game_state(), rng=np.random.default_rng(seed).random)
    game.set_policy(policy)
    game.set_game_speed(1)

    if db_path:
        if Path(db_path).exists():
            Path(db_path).unlink()
            print(f"Removed existing database: {db_path}")
        print(f"Initializing database: {db_path}")
        init_db(db_path)
        print()

    print(" Day |       Money | Rep | Staff | Proj | Morale | Phase")
    print("-" * 80)

    start_time = time.time()
    for _ in range(num_days):
        if auto_hire:
            autopilot(game)
        outcome = game.advance_day()
        if db_path:
            log_day(outcome.state, db_path)

        state = game.state
        if state.days_played % report_every == 0 or state.days_played == num_days:
            print(f"{state.days_played:4d} | {state.money:11,.0f} | {state.reputation:3.0f} | "
                  f"{len(state.employees):5d} | {state.total_projects_completed:4d} | "
                  f"{state.average_morale():6.1f} | {state.company_phase}")
        game.drain_notifications()

    total_time = time.time() - start_time
    stats = compute_company_stats(game.state)

    print()
    print("✓ Simulation complete!")
    print(f"  Total time: {total_time:.2f} seconds")
    print(f"  Final date: {game.state.current_date.isoformat()}")
    print(f"  Phase: {game.state.company_phase}")
    print(f"  Money: ${stats['money']:,.0f}")
    print(f"  Reputation: {stats['reputation']:.0f}")
    print(f"  Projects completed: {stats['projects_completed']:.0f}")
    print(f"  Research completed: {stats['research_completed']:.0f}")
    print(f"  Player market share: {stats['player_market_share']:.1f}%")
    print(f"  Achievements: {len(game.state.unlocked_achievements)}")
    if db_path:
        print(f"  Database saved to: {db_path}")
    return game


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    parser = argparse.ArgumentParser(description="Run a headless AI lab simulation.")
    parser.add_argument("--days", type=int, default=365, help="Number of days to simulate")
    parser.add_argument("--seed", type=int, default=CONFIG.seed, help="RNG seed")
    parser.add_argument("--auto-hire", action="store_true", help="Let a simple autopilot run the company")
    parser.add_argument("--policy", choices=["balanced", "crunch", "wellness"], default="balanced")
    parser.add_argument("--report-every", type=int, default=30, help="Print a row every N days")
    parser.add_argument("--db", type=str, default=None, help="Log daily KPIs to this sqlite file")
    args = parser.parse_args()

    main(
        num_days=args.days,
        seed=args.seed,
        auto_hire=args.auto_hire,
        policy=args.policy,
        report_every=args.report_every,
        db_path=args.db,
    )
