"""
Unit tests for the project engine

Tests cover:
- Daily progress from team skills, morale, policy and office bonuses
- Quality growth
- Edge-triggered completion with revenue and reputation payout
- Team morale deltas
- Project type unlocks
"""

from engines import Bonuses, unlockable_project_types, update_projects_for_day
from models import Employee, GameState, Office, Project


def employee(eid="e1", development=0, research=0, creativity=0, management=0, morale=70.0, role="engineer"):
    return Employee(
        id=eid,
        name=eid,
        role=role,
        skills={"development": development, "research": research,
                "creativity": creativity, "management": management},
        salary=1000,
        morale=morale,
    )


def project(team, progress=0, max_progress=10, complexity="simple", quality=3.0, market_appeal=3.0):
    return Project(
        id="p1",
        name="Chatbot",
        type="chatbot-basic",
        complexity=complexity,
        progress=progress,
        max_progress=max_progress,
        team=team,
        quality=quality,
        market_appeal=market_appeal,
    )


def state_with(employees, projects, policy="balanced", office=None):
    return GameState(employees=employees, projects=projects, policy=policy, office=office or Office())


def gain_for(state, combined=None, rooms=None):
    result = update_projects_for_day(state, combined or Bonuses(), rooms or Bonuses())
    return result.updated_projects[0].progress - state.projects[0].progress


class TestProjectProgress:
    """Progress formula"""

    def test_solo_developer_scenario(self):
        """dev=5, morale 70: floor(floor(3.5) * 0.85) = 2"""
        state = state_with([employee(development=5)], [project(["e1"])])
        result = update_projects_for_day(state, Bonuses(), Bonuses())

        assert result.updated_projects[0].progress == 2
        assert result.completed_projects == []
        assert result.revenue == 0

    def test_unskilled_team_stalls(self):
        state = state_with([employee()], [project(["e1"])])
        # max(1, 0) = 1, then the morale multiplier floors it back down
        assert gain_for(state) == 0

    def test_policy_multipliers(self):
        base = [employee(development=10)]
        assert gain_for(state_with(base, [project(["e1"])])) == 5
        assert gain_for(state_with(base, [project(["e1"])], policy="crunch")) == 6
        assert gain_for(state_with(base, [project(["e1"])], policy="wellness")) == 4

    def test_low_morale_penalty(self):
        """morale 20: floor(7 * 0.6) = 4, then floor(4 * 0.85) = 3"""
        state = state_with([employee(development=10, morale=20)], [project(["e1"])])
        assert gain_for(state) == 3

    def test_legacy_computers(self):
        office = Office(upgrades={"computers": 2})
        state = state_with([employee(development=10)], [project(["e1"])], office=office)
        assert gain_for(state) == 6

    def test_combined_productivity_bonus(self):
        state = state_with([employee(development=10)], [project(["e1"])])
        assert gain_for(state, combined=Bonuses(productivity_bonus=0.5)) == 7

    def test_teamwork_needs_two_people(self):
        rooms = Bonuses(teamwork_bonus=0.2)
        solo = state_with([employee(development=10)], [project(["e1"])])
        assert gain_for(solo, rooms=rooms) == 5

        pair = state_with(
            [employee("e1", development=10), employee("e2", development=10)],
            [project(["e1", "e2"])],
        )
        assert gain_for(pair) == 5
        assert gain_for(pair, rooms=rooms) == 6

    def test_complex_projects_get_research_bonus(self):
        state = state_with(
            [employee(development=10, research=6)],
            [project(["e1"], max_progress=100, complexity="complex")],
        )
        assert gain_for(state) == 8

    def test_progress_clamped_to_max(self):
        state = state_with([employee(development=10)], [project(["e1"], progress=0, max_progress=3)])
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert result.updated_projects == []
        assert result.completed_projects[0].id == "p1"

    def test_empty_team_is_unchanged(self):
        proj = project([])
        state = state_with([employee(development=10)], [proj])
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert result.updated_projects[0] is proj
        assert result.morale_deltas_by_employee == {}

    def test_departed_team_members_are_ignored(self):
        proj = project(["ghost"])
        state = state_with([employee(development=10)], [proj])
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert result.updated_projects[0] is proj

    def test_input_state_not_mutated(self):
        proj = project(["e1"])
        state = state_with([employee(development=5)], [proj])
        update_projects_for_day(state, Bonuses(), Bonuses())
        assert proj.progress == 0
        assert state.projects[0] is proj


class TestProjectQuality:
    """Quality growth"""

    def test_quality_gain(self):
        """(creativity 6 + research 4 * 0.6) / 120 = 0.07"""
        state = state_with(
            [employee(development=1, creativity=6, research=4)],
            [project(["e1"], max_progress=100)],
        )
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert abs(result.updated_projects[0].quality - (3.0 + 8.4 / 120)) < 1e-9

    def test_quality_gain_capped(self):
        state = state_with(
            [employee(creativity=10, research=10)],
            [project(["e1"], max_progress=100)],
        )
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert abs(result.updated_projects[0].quality - 3.12) < 1e-9

    def test_quality_never_exceeds_ten(self):
        state = state_with(
            [employee(creativity=10)],
            [project(["e1"], max_progress=100, quality=9.95)],
        )
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert result.updated_projects[0].quality == 10.0


class TestProjectCompletion:
    """Edge-triggered completion"""

    def test_completion_pays_out_once(self):
        state = state_with(
            [employee(development=5)],
            [project(["e1"], progress=9, max_progress=10, quality=10.0, market_appeal=3.0)],
        )
        result = update_projects_for_day(state, Bonuses(), Bonuses())

        assert result.updated_projects == []
        assert len(result.completed_projects) == 1
        # floor(3 * 1000 * 1.0 * 1.05)
        assert result.revenue == 3150
        # floor(10 * 2 + 3 + 0.5)
        assert result.reputation_gain == 23

        again = update_projects_for_day(
            state_with(state.employees, result.updated_projects), Bonuses(), Bonuses(),
        )
        assert again.completed_projects == []
        assert again.revenue == 0

    def test_project_already_at_max_does_not_retrigger(self):
        state = state_with([employee(development=5)], [project(["e1"], progress=10, max_progress=10)])
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert result.completed_projects == []
        assert result.updated_projects[0].progress == 10

    def test_revolutionary_completion_unlocks_agi(self):
        state = state_with(
            [employee(development=10)],
            [project(["e1"], progress=99, max_progress=100, complexity="revolutionary")],
        )
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert result.new_unlocked_types == ["agi"]

    def test_agi_not_unlocked_twice(self):
        state = state_with(
            [employee(development=10)],
            [project(["e1"], progress=99, max_progress=100, complexity="revolutionary")],
        )
        state.unlocked_project_types = ["chatbot-basic", "agi"]
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert result.new_unlocked_types == []


class TestTeamMorale:
    """Per-member morale deltas"""

    def test_balanced_delta(self):
        """-0.1 + 0.7 * 0.05 - 0 = -0.065"""
        state = state_with([employee(development=5)], [project(["e1"])])
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert abs(result.morale_deltas_by_employee["e1"] - (-0.065)) < 1e-9

    def test_crunch_penalty_softened_by_burnout_reduction(self):
        state = state_with([employee(development=5)], [project(["e1"])], policy="crunch")
        harsh = update_projects_for_day(state, Bonuses(), Bonuses())
        soft = update_projects_for_day(state, Bonuses(burnout_reduction=0.5), Bonuses())
        assert abs(harsh.morale_deltas_by_employee["e1"] - (-0.165)) < 1e-9
        assert abs(soft.morale_deltas_by_employee["e1"] - (-0.115)) < 1e-9

    def test_wellness_bonus(self):
        state = state_with([employee(development=5)], [project(["e1"])], policy="wellness")
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert abs(result.morale_deltas_by_employee["e1"] - 0.015) < 1e-9

    def test_repeated_member_counts_once(self):
        once = state_with([employee(development=5)], [project(["e1"])])
        twice = state_with([employee(development=5)], [project(["e1", "e1"])])
        assert gain_for(twice) == gain_for(once) == 2
        result = update_projects_for_day(twice, Bonuses(), Bonuses())
        assert abs(result.morale_deltas_by_employee["e1"] - (-0.065)) < 1e-9

    def test_zero_morale_members_skipped(self):
        state = state_with([employee(development=5, morale=0)], [project(["e1"])])
        result = update_projects_for_day(state, Bonuses(), Bonuses())
        assert "e1" not in result.morale_deltas_by_employee


class TestUnlockableProjectTypes:
    """Research-driven project type unlocks"""

    def test_single_requirement(self):
        assert unlockable_project_types(["chatbot-basic"], ["transformer-basics"]) == ["image-classifier"]

    def test_all_requirements_needed(self):
        unlocked = unlockable_project_types(
            ["chatbot-basic"], ["transformer-advanced", "agent-systems", "neural-architecture"],
        )
        assert unlocked == ["code-assistant", "autonomous-agent", "frontier-model"]

    def test_already_unlocked_skipped(self):
        assert unlockable_project_types(["chatbot-basic", "image-classifier"], ["transformer-basics"]) == []
