"""
Company statistics.

Summaries of a GameState for the dashboard, the KPI log and the headless
runner's report.
"""

from typing import Dict

import numpy as np

from models import SKILL_NAMES, GameState


def compute_company_stats(state: GameState) -> Dict[str, float]:
    """
    Calculate headline metrics for monitoring and display.

    Returns:
        Flat dict of floats: team size, morale/salary/skill spread, market
        share, project and research counts, and rolling history means.
    """
    stats: Dict[str, float] = {
        "day": float(state.days_played),
        "money": float(state.money),
        "reputation": float(state.reputation),
        "legacy_points": float(state.legacy_points),
        "employees": float(len(state.employees)),
        "active_projects": float(len(state.projects)),
        "projects_completed": float(state.total_projects_completed),
        "research_completed": float(state.completed_research_count()),
        "shipped_products": float(len(state.shipped_products)),
        "player_market_share": float(state.player_market_share()),
        "total_revenue_ever": float(state.total_revenue_ever),
    }

    if state.employees:
        morale = np.array([e.morale for e in state.employees], dtype=np.float64)
        salaries = np.array([e.salary for e in state.employees], dtype=np.float64)
        skills = np.array([[e.skills[s] for s in SKILL_NAMES] for e in state.employees], dtype=np.float64)

        stats["mean_morale"] = float(np.mean(morale))
        stats["median_morale"] = float(np.median(morale))
        stats["min_morale"] = float(np.min(morale))
        stats["monthly_payroll"] = float(np.sum(salaries))
        stats["median_salary"] = float(np.median(salaries))
        for name, mean in zip(SKILL_NAMES, np.mean(skills, axis=0)):
            stats[f"mean_{name}"] = float(mean)
    else:
        stats.update({"mean_morale": 0.0, "median_morale": 0.0, "min_morale": 0.0,
                      "monthly_payroll": 0.0, "median_salary": 0.0})
        for name in SKILL_NAMES:
            stats[f"mean_{name}"] = 0.0

    # Rolling chart windows
    for key, history in (("revenue", state.revenue_history),
                         ("morale", state.morale_history),
                         ("reputation", state.reputation_history)):
        stats[f"{key}_history_mean"] = float(np.mean(history)) if history else 0.0

    if state.competitors:
        shares = np.array([c.market_share for c in state.competitors], dtype=np.float64)
        stats["top_rival_share"] = float(np.max(shares))
    else:
        stats["top_rival_share"] = 0.0

    return stats
