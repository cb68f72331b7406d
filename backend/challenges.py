"""
Daily and weekly challenge templates.

Generation is deterministic: the same seed always yields the same
challenge, so a reloaded save regenerates exactly what the player saw.
"""

from typing import Dict, List

from config import CONFIG
from models import Challenge

GOAL_TYPES = (
    "complete_projects",
    "earn_money",
    "hire_employees",
    "complete_research",
    "train_employees",
    "complete_contracts",
    "reach_morale",
    "ship_products",
)

# title, description, goal type, target, reward money, reward reputation
DAILY_TEMPLATES: List[tuple] = [
    ("Ship 1 Project", "Complete any project today", "complete_projects", 1, 2000, 2),
    ("Earn $10k", "Earn $10,000 in a single day", "earn_money", 10000, 1000, 1),
    ("Train 1 Employee", "Train any employee skill", "train_employees", 1, 1500, 1),
    ("Team Morale 80%", "Keep average team morale at 80%+", "reach_morale", 80, 2500, 3),
    ("Complete 1 Contract", "Finish a contract", "complete_contracts", 1, 3000, 2),
    ("Research Progress", "Make progress on any research", "complete_research", 1, 2000, 2),
    ("Hire 1 Employee", "Add a new team member", "hire_employees", 1, 1500, 1),
    ("Productize 1 Project", "Ship a product for passive income", "ship_products", 1, 5000, 5),
]

# title, description, goal type, target, reward money, reward reputation, reward legacy
WEEKLY_TEMPLATES: List[tuple] = [
    ("Ship 5 Projects", "Complete 5 projects this week", "complete_projects", 5, 15000, 15, 1),
    ("Earn $100k", "Earn $100,000 this week", "earn_money", 100000, 10000, 10, 1),
    ("Train 5 Employees", "Train 5 employee skills", "train_employees", 5, 12000, 8, 1),
    ("Complete 3 Contracts", "Finish 3 contracts this week", "complete_contracts", 3, 20000, 12, 1),
    ("Complete 2 Research", "Finish 2 research projects", "complete_research", 2, 25000, 20, 2),
    ("Hire 3 Employees", "Grow the team by 3", "hire_employees", 3, 10000, 8, 1),
    ("Ship 3 Products", "Productize 3 projects", "ship_products", 3, 30000, 25, 2),
]


def generate_daily_challenge(day_seed: int) -> Challenge:
    index = (day_seed * CONFIG.challenges.daily_seed_multiplier) % len(DAILY_TEMPLATES)
    title, description, goal_type, target, money, reputation = DAILY_TEMPLATES[index]
    return Challenge(
        id=f"daily-{day_seed}",
        type="daily",
        title=title,
        description=description,
        goal_type=goal_type,
        target=target,
        reward_money=money,
        reward_reputation=reputation,
    )


def generate_weekly_challenge(week_seed: int) -> Challenge:
    index = (week_seed * CONFIG.challenges.weekly_seed_multiplier) % len(WEEKLY_TEMPLATES)
    title, description, goal_type, target, money, reputation, legacy = WEEKLY_TEMPLATES[index]
    return Challenge(
        id=f"weekly-{week_seed}",
        type="weekly",
        title=title,
        description=description,
        goal_type=goal_type,
        target=target,
        reward_money=money,
        reward_reputation=reputation,
        reward_legacy=legacy,
    )


def bump_progress(progress: Dict[str, float], goal_type: str, amount: float = 1) -> Dict[str, float]:
    """Return a copy of a progress map with one goal incremented."""
    updated = dict(progress)
    updated[goal_type] = updated.get(goal_type, 0) + amount
    return updated
