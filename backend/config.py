"""
Simulation Configuration

Centralizes all tunable parameters for the AI lab simulation.
Every coefficient the daily engines use lives here instead of being
scattered through the engine code as magic numbers.

Deployment settings (database path, clock cadence, seed) can be overridden
from the environment or a local .env file.
"""

import os
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


@dataclass
class TimeConfig:
    """Clock and history constants."""
    start_date: date = date(2024, 1, 1)
    seconds_per_day: float = 1.0  # Real-time seconds per simulated day at speed 1
    allowed_speeds: Tuple[int, ...] = (0, 1, 2, 4)
    days_per_week: int = 7
    history_length: int = 30  # Revenue/morale/reputation chart window
    news_feed_length: int = 20


@dataclass
class ProjectConfig:
    """Project engine coefficients."""

    # Output
    development_weight: float = 0.7
    management_weight: float = 0.3
    morale_floor_multiplier: float = 0.5  # Output at 0 morale
    morale_span_multiplier: float = 0.5  # Extra output at 100 morale
    crunch_multiplier: float = 1.2
    wellness_multiplier: float = 0.9
    low_morale_threshold: float = 40.0
    low_morale_penalty: float = 0.85
    computer_bonus: float = 0.1  # Per legacy computer upgrade

    # Quality
    max_daily_quality_gain: float = 0.12
    quality_research_weight: float = 0.6
    quality_divisor: float = 120.0
    max_quality: float = 10.0

    # Completion payout
    revenue_per_appeal: float = 1000.0
    team_revenue_bonus: float = 0.05
    quality_reputation_weight: float = 2.0
    team_reputation_bonus: float = 0.5

    # Team morale drift
    base_morale_drift: float = -0.1
    morale_momentum: float = 0.05
    management_relief: float = 0.05
    crunch_morale_penalty: float = 0.1
    wellness_morale_gain: float = 0.08


@dataclass
class ResearchConfig:
    """Research engine constants."""
    base_daily_gain: int = 1
    researcher_role: str = "researcher"


@dataclass
class OfficeConfig:
    """Room and slot upgrade constants."""
    burnout_cap: float = 0.8
    slot_level_step: float = 0.4  # Level 1/2/3 -> x1.0/1.4/1.8
    room_max_level: int = 3
    refund_fraction: float = 0.5
    room_upgrade_cost_factor: float = 0.75
    slot_upgrade_cost_factor: float = 0.6


@dataclass
class FinanceConfig:
    """Cash and prestige constants."""
    starting_money: float = 100000.0
    prestige_money_bonus: float = 0.1  # Extra starting cash per prestige level
    legacy_per_project: float = 2.0
    legacy_per_day: float = 0.5
    legacy_revenue_divisor: float = 50000.0


@dataclass
class MoraleConfig:
    """Morale updater parameters."""
    coffee_bonus: float = 0.5  # Per legacy coffee machine
    nap_pod_bonus: float = 1.0  # Per legacy nap pod, only below the threshold
    nap_pod_threshold: float = 50.0
    min_morale: float = 0.0
    max_morale: float = 100.0

    # Low-morale quit hook. Both None means no thresholds have been chosen and
    # nobody quits.
    quit_morale_threshold: Optional[float] = None
    quit_chance: Optional[float] = None


@dataclass
class CompetitorConfig:
    """Rival market dynamics."""
    walk_amplitude: float = 2.0  # Share walk is (rng() - 0.5) * amplitude
    action_chance: float = 0.15
    min_share: float = 1.0
    max_share: float = 45.0
    total_share_cap: float = 100.0
    activity_length: int = 5
    min_reputation: float = 0.0
    max_reputation: float = 100.0


@dataclass
class ChallengeConfig:
    """Seeded challenge generation."""
    daily_seed_multiplier: int = 7919
    weekly_seed_multiplier: int = 7877


@dataclass
class EventConfig:
    """Narrative event trigger."""
    daily_trigger_chance: float = 0.05


@dataclass
class PersistenceConfig:
    """Save slot and KPI log."""
    db_path: str = field(default_factory=lambda: os.getenv("AILAB_DB_PATH", "ailab.db"))
    storage_key: str = "aiLabTycoonSave"
    save_version: str = "1.0"


@dataclass
class SimulationConfig:
    """Master configuration for the entire simulation."""

    # Sub-configurations
    time: TimeConfig = field(default_factory=TimeConfig)
    projects: ProjectConfig = field(default_factory=ProjectConfig)
    research: ResearchConfig = field(default_factory=ResearchConfig)
    office: OfficeConfig = field(default_factory=OfficeConfig)
    finance: FinanceConfig = field(default_factory=FinanceConfig)
    morale: MoraleConfig = field(default_factory=MoraleConfig)
    competitors: CompetitorConfig = field(default_factory=CompetitorConfig)
    challenges: ChallengeConfig = field(default_factory=ChallengeConfig)
    events: EventConfig = field(default_factory=EventConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)

    # Production RNG seed (None = fresh entropy)
    seed: Optional[int] = field(
        default_factory=lambda: int(os.environ["AILAB_SEED"]) if os.getenv("AILAB_SEED") else None
    )

    def __post_init__(self):
        """Validation and derived values."""
        env_seconds = os.getenv("AILAB_SECONDS_PER_DAY")
        if env_seconds:
            self.time.seconds_per_day = float(env_seconds)

        # Validate time parameters
        if self.time.seconds_per_day <= 0:
            raise ValueError("seconds_per_day must be positive")
        if 0 not in self.time.allowed_speeds:
            raise ValueError("allowed_speeds must include 0 (paused)")
        if self.time.history_length <= 0:
            raise ValueError("history_length must be positive")

        # Validate bounds
        if not (0.0 <= self.office.burnout_cap <= 1.0):
            raise ValueError("burnout_cap must be in [0, 1]")
        if not (0.0 < self.competitors.min_share <= self.competitors.max_share):
            raise ValueError("competitor share bounds are inverted")
        if not (0.0 <= self.competitors.action_chance <= 1.0):
            raise ValueError("action_chance must be in [0, 1]")
        if not (0.0 <= self.events.daily_trigger_chance <= 1.0):
            raise ValueError("daily_trigger_chance must be in [0, 1]")

        # The quit hook needs both halves or neither
        quit_fields = (self.morale.quit_morale_threshold, self.morale.quit_chance)
        if (quit_fields[0] is None) != (quit_fields[1] is None):
            raise ValueError("quit_morale_threshold and quit_chance must be set together")
        if self.morale.quit_chance is not None and not (0.0 <= self.morale.quit_chance <= 1.0):
            raise ValueError("quit_chance must be in [0, 1]")


# Global configuration instance
CONFIG = SimulationConfig()
