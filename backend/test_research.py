"""
Unit tests for the research engine

Tests cover:
- The researcher gate
- Started vs merely available nodes
- Research bonus
- Completion and unlock fan-out
"""

from dataclasses import replace

from content import initial_research_nodes
from engines import Bonuses, update_research_for_day
from models import Employee, GameState


def staff(role):
    return Employee(id=f"{role}-1", name=role, role=role, skills={}, salary=1000, morale=70)


def research_state(progress=None, roles=("researcher",), technologies=()):
    """Fresh tree with the given {node_id: progress} applied."""
    nodes = []
    for node in initial_research_nodes():
        if progress and node.id in progress:
            node = replace(node, progress=progress[node.id])
        nodes.append(node)
    return GameState(
        employees=[staff(role) for role in roles],
        research_nodes=nodes,
        unlocked_technologies=list(technologies),
    )


def node(result, node_id):
    return next(n for n in result.research_nodes if n.id == node_id)


class TestResearchProgress:
    """Daily progress"""

    def test_started_node_advances(self):
        state = research_state({"transformer-basics": 1})
        result = update_research_for_day(state, Bonuses())
        assert node(result, "transformer-basics").progress == 2
        assert result.newly_completed_research == []

    def test_no_researcher_stalls_everything(self):
        state = research_state({"transformer-basics": 1}, roles=("engineer", "designer"))
        result = update_research_for_day(state, Bonuses())
        assert result.research_nodes[0] is state.research_nodes[0]
        assert node(result, "transformer-basics").progress == 1

    def test_available_but_not_started_is_unchanged(self):
        state = research_state()
        result = update_research_for_day(state, Bonuses())
        for before, after in zip(state.research_nodes, result.research_nodes):
            assert before is after

    def test_locked_node_does_not_advance(self):
        state = research_state({"transformer-advanced": 5})
        result = update_research_for_day(state, Bonuses())
        assert node(result, "transformer-advanced").progress == 5

    def test_research_bonus(self):
        state = research_state({"transformer-basics": 1})
        assert node(update_research_for_day(state, Bonuses(research_bonus=0.5)), "transformer-basics").progress == 2
        assert node(update_research_for_day(state, Bonuses(research_bonus=1.0)), "transformer-basics").progress == 3


class TestResearchCompletion:
    """Completion and unlocks"""

    def test_completion_clamps_and_unlocks(self):
        state = research_state({"transformer-basics": 29})
        result = update_research_for_day(state, Bonuses(research_bonus=1.0))

        done = node(result, "transformer-basics")
        assert done.completed
        assert done.progress == done.time_required == 30
        assert result.newly_completed_research == ["transformer-basics"]
        for unlocked in ("transformer-advanced", "multimodal-basics", "efficient-training"):
            assert node(result, unlocked).unlocked
        assert not node(result, "rlhf-basics").unlocked

    def test_unlock_independent_of_order(self):
        """A node later in the list can unlock one earlier in the list"""
        state = research_state({"transformer-basics": 29}, roles=("researcher",))
        nodes = list(reversed(state.research_nodes))
        result = update_research_for_day(replace(state, research_nodes=nodes), Bonuses())
        assert node(result, "transformer-advanced").unlocked

    def test_already_known_completion_not_reported(self):
        state = research_state()
        nodes = [replace(n, completed=True, progress=n.time_required) if n.id == "transformer-basics" else n
                 for n in state.research_nodes]
        state = replace(state, research_nodes=nodes, unlocked_technologies=["transformer-basics"])
        result = update_research_for_day(state, Bonuses())
        assert result.newly_completed_research == []

    def test_input_not_mutated(self):
        state = research_state({"transformer-basics": 29})
        update_research_for_day(state, Bonuses())
        assert state.research_nodes[0].progress == 29
        assert not state.research_nodes[0].completed
