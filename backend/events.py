"""
Narrative event catalog.

Each event carries an optional trigger condition evaluated directly against
the live GameState, and a list of choices whose effects the session applies
when the player picks one.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from models import GameState


@dataclass(frozen=True)
class EventChoice:
    id: str
    label: str
    description: str = ""
    # money, reputation, research_points, unlock_tech, unlock_project,
    # fire_employee, boost_morale
    effects: Dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class GameEvent:
    id: str
    title: str
    description: str
    probability: float
    choices: List[EventChoice]
    trigger_condition: Optional[Callable[[GameState], bool]] = None

    def is_eligible(self, state: GameState) -> bool:
        return self.trigger_condition is None or bool(self.trigger_condition(state))

    def choice(self, choice_id: str) -> Optional[EventChoice]:
        return next((c for c in self.choices if c.id == choice_id), None)


def _early(state: GameState) -> bool:
    return state.office.size == "hacker_den"


def _mid(state: GameState) -> bool:
    return state.office.size in ("small", "medium")


def _late(state: GameState) -> bool:
    return state.office.size in ("large", "campus")


GAME_EVENTS: List[GameEvent] = [
    GameEvent(
        "vc-funding", "An Eccentric Billionaire Wants to Invest",
        "A flashy investor offers $50,000 for 10% of the company. The press will not be kind.",
        0.15,
        [
            EventChoice("accept", "Take the Money", "The money is good, even if the advice isn't",
                        {"money": 50000, "reputation": -5}),
            EventChoice("decline", "Politely Decline", "Keep your independence", {"reputation": 10}),
        ],
        lambda s: _early(s) and s.money < 200000,
    ),
    GameEvent(
        "open-source", "Open Source Request",
        "Your lead architect wants to open-source the core algorithm.",
        0.1,
        [
            EventChoice("accept", "Open Source It", "Share with the community",
                        {"reputation": 25, "research_points": 10, "money": -10000}),
            EventChoice("decline", "Keep It Proprietary", "Protect your IP",
                        {"reputation": -5, "money": 15000}),
        ],
        lambda s: s.completed_research_count() >= 1,
    ),
    GameEvent(
        "safety-scandal", "AI Safety Scandal!",
        "Your model tweeted something controversial. The press is outside.",
        0.08,
        [
            EventChoice("apologize", "Public Apology", "Take responsibility",
                        {"reputation": -15, "money": -20000}),
            EventChoice("blame-training", "Blame the Training Data", "A classic move", {"reputation": -25}),
            EventChoice("double-down", "Double Down", "Consider the elephant",
                        {"reputation": -50, "money": 10000}),
        ],
        lambda s: s.reputation >= 30,
    ),
    GameEvent(
        "talent-war", "A Rival is Poaching Your Team",
        "A big lab is offering your best engineers double their salary.",
        0.1,
        [
            EventChoice("match-offer", "Match the Offers", "Keep your team together", {"money": -30000}),
            EventChoice("let-go", "Let Them Go", "Sometimes talent walks",
                        {"fire_employee": True, "reputation": -5}),
            EventChoice("counter-poach", "Poach Them Back", "Two can play this game",
                        {"money": -50000, "reputation": 15}),
        ],
        lambda s: len(s.employees) >= 6,
    ),
    GameEvent(
        "viral-demo", "Your Demo Went Viral!",
        "Your product demo has 10 million views. Investors are calling.",
        0.05,
        [
            EventChoice("capitalize", "Ride the Wave", "Maximum PR push", {"reputation": 30, "money": 25000}),
            EventChoice("stay-humble", "Stay Humble", "Focus on the product",
                        {"reputation": 15, "research_points": 5}),
        ],
        lambda s: s.total_projects_completed >= 1,
    ),
    GameEvent(
        "tech-conference", "Conference Keynote Invitation",
        "You've been invited to present at the biggest startup conference of the year.",
        0.12,
        [
            EventChoice("present", "Accept & Present", "Big stage, big opportunity",
                        {"money": -5000, "reputation": 20}),
            EventChoice("decline", "Too Busy Building", "Skip the conference circuit", {"research_points": 5}),
        ],
        lambda s: _mid(s) and s.reputation >= 10,
    ),
    GameEvent(
        "acquisition-offer", "Acquisition Offer from OmniCorp",
        "OmniCorp wants to acquire your lab for $500,000.",
        0.08,
        [
            EventChoice("accept", "Accept Offer", "Cash out now", {"money": 500000, "reputation": -20}),
            EventChoice("counter", "Counter: $1 Million", "Bold move", {"reputation": 10}),
            EventChoice("decline", "Not For Sale", "This is your vision", {"reputation": 15}),
        ],
        lambda s: _late(s) and s.money >= 250000,
    ),
    GameEvent(
        "server-crash", "Servers on Fire",
        "The experimental cooling solution failed. The server room is smoking.",
        0.1,
        [
            EventChoice("cloud", "Emergency Cloud Migration", "Fast and expensive",
                        {"money": -25000, "reputation": -5}),
            EventChoice("rebuild", "Rebuild In-House", "Slower, cheaper",
                        {"money": -15000, "research_points": -3}),
        ],
        lambda s: s.completed_research_count() >= 2,
    ),
    GameEvent(
        "coffee-crisis", "Coffee Machine Broke",
        "The coffee machine is dead and nobody is happy.",
        0.15,
        [
            EventChoice("premium", "Buy Premium Machine", "Invest in morale", {"money": -2000, "boost_morale": 20}),
            EventChoice("basic", "Basic Replacement", "It's just coffee", {"money": -500}),
            EventChoice("nothing", "Coffee is a Crutch", "Real engineers drink water", {"boost_morale": -10}),
        ],
        lambda s: len(s.employees) >= 3,
    ),
    GameEvent(
        "patent-troll", "Patent Troll Attack",
        "A shell company claims a patent on 'using computers to do stuff.'",
        0.08,
        [
            EventChoice("settle", "Settle Out of Court", "Make it go away", {"money": -50000}),
            EventChoice("fight", "Fight in Court", "Expensive but principled", {"money": -80000, "reputation": 20}),
            EventChoice("ignore", "Ignore Them", "Bold strategy", {"reputation": -10}),
        ],
        lambda s: s.reputation >= 20,
    ),
    GameEvent(
        "code-war", "Code War",
        "Two senior engineers are fighting over whose algorithm is better.",
        0.12,
        [
            EventChoice("first", "Use the First Design", "He needs the win", {"reputation": 5, "research_points": 3}),
            EventChoice("second", "Use the Second Design", "It's probably better", {"research_points": 5}),
            EventChoice("merge", "Force Them to Collaborate", "Everyone wins, eventually",
                        {"reputation": 10, "research_points": 8}),
        ],
        lambda s: len(s.employees) >= 4,
    ),
    GameEvent(
        "team-retreat", "Team Retreat Proposal",
        "Your operations lead wants to organize a team retreat.",
        0.1,
        [
            EventChoice("retreat", "Approve the Retreat", "Team bonding!", {"money": -8000, "boost_morale": 15}),
            EventChoice("decline", "Maybe Next Quarter", "Budgets are tight", {"boost_morale": -5}),
        ],
        lambda s: len(s.employees) >= 5,
    ),
    GameEvent(
        "research-breakthrough", "Unexpected Breakthrough",
        "A late-night experiment shortcut a whole stage of efficient training research.",
        0.05,
        [
            EventChoice("publish", "Publish It", "Claim the credit",
                        {"reputation": 15, "unlock_tech": ["efficient-training"]}),
            EventChoice("productize", "Build an API on It", "Ship first, publish later",
                        {"unlock_project": ["efficient-api"], "money": 5000}),
        ],
        lambda s: s.completed_research_count() >= 1 and "efficient-training" not in s.unlocked_technologies,
    ),
    GameEvent(
        "government-contract", "Government Contract Opportunity",
        "A three-letter agency wants your models for 'national security purposes.'",
        0.07,
        [
            EventChoice("accept", "Take the Contract", "Money is money", {"money": 100000, "reputation": -20}),
            EventChoice("decline", "Decline Ethically", "Some lines you don't cross", {"reputation": 15}),
        ],
        lambda s: _late(s) and s.reputation >= 40,
    ),
    GameEvent(
        "gpu-shortage", "GPU Shortage",
        "Cloud providers are rationing accelerators. Training runs are stalling.",
        0.1,
        [
            EventChoice("buy", "Buy at Scalper Prices", "Keep the lights on", {"money": -40000}),
            EventChoice("wait", "Wait It Out", "Patience is cheaper", {"research_points": -5}),
        ],
        lambda s: _mid(s) and "gpu-shortage" not in s.event_history,
    ),
]

GAME_EVENTS_BY_ID: Dict[str, GameEvent] = {event.id: event for event in GAME_EVENTS}


def get_event(event_id: Optional[str]) -> Optional[GameEvent]:
    if event_id is None:
        return None
    return GAME_EVENTS_BY_ID.get(event_id)
