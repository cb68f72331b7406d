"""Random hiring candidates."""

import itertools
from typing import Callable

from models import ROLES, SKILL_NAMES, Employee

FIRST_NAMES = ["Alex", "Jordan", "Sam", "Taylor", "Casey", "Morgan", "Riley", "Quinn", "Drew", "Jamie"]
LAST_NAMES = ["Chen", "Patel", "Kim", "Rodriguez", "Singh", "Martinez", "Nguyen", "Brown", "Lee", "Wang"]
TRAITS = ["Coffee Addict", "Burnout Risk", "Genius", "Overpromiser"]

SALARY_PER_SKILL_POINT = 500

_counter = itertools.count(1)


def _pick(options, rng: Callable[[], float]):
    return options[int(rng() * len(options))]


def generate_candidate(rng: Callable[[], float]) -> Employee:
    """
    Build a random candidate.

    Skills are 1-5 each, salary is 500 per skill point, starting morale is
    70-99 and each trait shows up with 30% probability.
    """
    role = _pick(ROLES, rng)
    skills = {skill: int(rng() * 5) + 1 for skill in SKILL_NAMES}
    salary = sum(skills.values()) * SALARY_PER_SKILL_POINT
    traits = [trait for trait in TRAITS if rng() > 0.7]
    name = f"{_pick(FIRST_NAMES, rng)} {_pick(LAST_NAMES, rng)}"
    return Employee(
        id=f"emp-{next(_counter)}-{int(rng() * 1e9):09d}",
        name=name,
        role=role,
        skills=skills,
        salary=salary,
        morale=70 + int(rng() * 30),
        traits=traits,
    )
