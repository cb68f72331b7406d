"""
Integration tests for the daily orchestrator and the Game session

Tests cover:
- advance_day sequencing over a whole GameState
- Clock gating (pause and speed)
- Player actions, their validation and error notifications
- Events, achievements and prestige
- Save and load through a SaveStore
"""

from dataclasses import replace
from datetime import date

import pytest

from challenges import generate_daily_challenge
from events import GAME_EVENTS, EventChoice, GameEvent, get_event
from game import (
    EFFECT_CHALLENGE_COMPLETE,
    EFFECT_EVENT,
    EFFECT_PROJECT_COMPLETE,
    Game,
    advance_day,
    find_event,
    new_game_state,
)
from models import Employee, GameState, Office, Project
from persistence import SaveStore


def constant(value):
    return lambda: value


def employee(eid="e1", development=5, morale=70.0, role="engineer", salary=1000):
    return Employee(id=eid, name=f"Dev {eid}", role=role,
                    skills={"development": development}, salary=salary, morale=morale)


def project(team, progress=0, max_progress=10, quality=3.0, market_appeal=3.0):
    return Project(id="p1", name="Chatbot", type="chatbot-basic", complexity="simple",
                   progress=progress, max_progress=max_progress, team=team,
                   quality=quality, market_appeal=market_appeal)


def bare_state(**overrides):
    """Empty office and no rivals, so only the engines under test move."""
    base = GameState(office=Office(rent=500))
    return replace(base, **overrides)


def poach_event():
    return GameEvent("poach", "Poached!", "A rival lab wants one of yours.", 1.0, [
        EventChoice("let-go", "Let them go", effects={"fire_employee": True, "boost_morale": 10}),
    ])


@pytest.fixture
def game():
    g = Game(rng=constant(0.5))
    g.drain_notifications()
    return g


class TestAdvanceDay:
    """The pure daily orchestrator"""

    def test_solo_developer_day(self):
        state = bare_state(employees=[employee()], projects=[project(["e1"])])
        outcome = advance_day(state, constant(0.5))
        new = outcome.state

        assert new.current_date == date(2024, 1, 2)
        assert new.days_played == 1
        assert new.projects[0].progress == 2
        assert new.money == 100000
        assert abs(new.employees[0].morale - 69.935) < 1e-9
        assert new.revenue_history == [0]
        assert abs(new.morale_history[0] - 69.935) < 1e-9
        assert outcome.notifications == []
        assert outcome.event is None

    def test_input_state_untouched(self):
        state = bare_state(employees=[employee()], projects=[project(["e1"])])
        advance_day(state, constant(0.5))
        assert state.days_played == 0
        assert state.projects[0].progress == 0
        assert state.employees[0].morale == 70

    def test_money_clamped_at_zero(self):
        state = bare_state(money=100, current_date=date(2024, 1, 31))
        outcome = advance_day(state, constant(0.5))
        assert outcome.state.money == 0

    def test_histories_keep_thirty_days(self):
        state = bare_state(revenue_history=[1.0] * 30, reputation_history=[5.0] * 30)
        new = advance_day(state, constant(0.5)).state
        assert len(new.revenue_history) == 30
        assert new.revenue_history[-1] == 0
        assert len(new.reputation_history) == 30

    def test_missing_challenges_are_generated(self):
        new = advance_day(bare_state(), constant(0.5)).state
        assert new.daily_challenge.id == "daily-1"
        assert new.weekly_challenge.id == "weekly-0"

    def test_completion_day(self):
        state = bare_state(
            employees=[employee()],
            projects=[project(["e1"], progress=9, quality=10.0)],
            daily_challenge=generate_daily_challenge(0),
        )
        outcome = advance_day(state, constant(0.5))
        new = outcome.state

        assert new.projects == []
        assert new.total_projects_completed == 1
        assert new.projects_completed_this_day == 1
        # 3150 project revenue plus the "Ship 1 Project" reward
        assert new.money == 100000 + 3150 + 2000
        assert new.reputation == 23 + 2
        assert new.total_daily_challenges_completed == 1
        assert new.revenue_this_day == 3150

        messages = [n.message for n in outcome.notifications]
        assert messages == ['"Chatbot" completed! +$3,000', "Daily challenge completed! +$2,000"]
        assert outcome.effects == [EFFECT_PROJECT_COMPLETE, EFFECT_CHALLENGE_COMPLETE]

    def test_event_triggered(self):
        outcome = advance_day(bare_state(), constant(0.0), catalog=[poach_event()])
        assert outcome.event.id == "poach"
        assert outcome.state.active_event_id == "poach"
        assert EFFECT_EVENT in outcome.effects

    def test_open_event_blocks_another(self):
        state = bare_state(active_event_id="poach")
        outcome = advance_day(state, constant(0.0), catalog=[poach_event()])
        assert outcome.event is None
        assert outcome.state.active_event_id == "poach"

    def test_phase_up(self):
        staff = [employee("a"), employee("b"), employee("c")]
        state = bare_state(money=300000, reputation=30, employees=staff, total_projects_completed=3)
        outcome = advance_day(state, constant(0.5))
        assert outcome.state.company_phase == "growth"
        # Phase bonus lands on top
        assert outcome.state.reputation == 40
        assert outcome.notifications[-1].message == "Company phase: Growth Stage!"


class TestClock:

    def test_paused_game_does_not_advance(self):
        g = Game(rng=constant(0.5))
        assert g.is_paused
        assert g.advance_day() is None
        assert g.state.days_played == 0

    def test_running_game_advances(self, game):
        game.set_game_speed(2)
        assert not game.is_paused
        outcome = game.advance_day()
        assert outcome.state is game.state
        assert game.state.days_played == 1

    def test_speed_zero_pauses(self, game):
        game.set_game_speed(4)
        game.set_game_speed(0)
        assert game.is_paused

    def test_unsupported_speed(self, game):
        assert not game.set_game_speed(3)
        notes = game.drain_notifications()
        assert notes[0].type == "error"

    def test_toggle_pause(self, game):
        assert game.toggle_pause() is False
        assert game.toggle_pause() is True

    def test_policy(self, game):
        assert game.set_policy("crunch")
        assert game.state.policy == "crunch"
        assert not game.set_policy("yolo")
        assert game.state.policy == "crunch"


class TestSinks:

    def test_notification_and_effect_sinks(self):
        notes, effects = [], []
        g = Game(state=bare_state(), rng=constant(0.0), notification_sink=notes.append,
                 effect_sink=effects.append, event_catalog=[poach_event()])
        g.set_game_speed(1)
        g.advance_day()
        assert EFFECT_EVENT in effects
        assert g.active_event().id == "poach"

        g.hire_employee(employee("x"))
        assert any(n.message == "Dev x joined as engineer" for n in notes)


class TestStaffActions:

    def test_hire(self, game):
        assert game.hire_employee(employee())
        assert game.state.employee("e1") is not None
        assert game.state.daily_challenge_progress["hire_employees"] == 1
        assert "first-hire" in game.state.unlocked_achievements
        messages = [n.message for n in game.drain_notifications()]
        assert "Achievement unlocked: Founding Team!" in messages

    def test_hire_random_candidate(self, game):
        assert game.hire_employee()
        assert len(game.state.employees) == 1

    def test_duplicate_hire_rejected(self, game):
        game.hire_employee(employee())
        assert not game.hire_employee(employee())
        assert len(game.state.employees) == 1

    def test_fire_leaves_projects(self, game):
        game.hire_employee(employee("a"))
        game.hire_employee(employee("b"))
        game.start_project("chatbot-basic", ["a", "b"])
        assert game.fire_employee("a")
        assert game.state.projects[0].team == ["b"]
        assert not game.fire_employee("a")

    def test_train(self, game):
        game.hire_employee(employee(development=9))
        assert game.train_employee("e1", "development")
        trained = game.state.employee("e1")
        assert trained.skills["development"] == 10
        assert trained.salary == 1100
        assert game.state.money == 95000
        assert game.state.total_trainings_done == 1

        assert not game.train_employee("e1", "development")
        assert not game.train_employee("e1", "juggling")
        assert game.state.money == 95000

    def test_ship_product_and_contract(self, game):
        assert game.ship_product("Chat Pro", 250.7)
        assert game.state.shipped_products[0].daily_revenue == 250
        assert not game.ship_product("  ", 100)

        assert game.complete_contract(5000)
        assert game.state.money == 105000
        assert game.state.total_contracts_completed == 1


class TestProjectActions:

    def test_start_project(self, game):
        game.hire_employee(employee())
        assert game.start_project("chatbot-basic", ["e1"], name="Helper")
        started = game.state.projects[0]
        assert started.name == "Helper"
        assert started.max_progress == 20
        assert started.quality == 3
        assert game.state.money == 95000

    @pytest.mark.parametrize("type_id,team", [
        ("nonsense", ["e1"]),
        ("code-assistant", ["e1"]),
        ("chatbot-basic", []),
        ("chatbot-basic", ["e1", "e1"]),
        ("chatbot-basic", ["ghost"]),
    ])
    def test_invalid_starts_rejected(self, game, type_id, team):
        game.hire_employee(employee())
        game.drain_notifications()
        assert not game.start_project(type_id, team)
        assert game.state.projects == []
        assert game.state.money == 100000
        assert game.drain_notifications()[0].type == "error"

    def test_member_on_two_projects_rejected(self, game):
        game.hire_employee(employee())
        game.start_project("chatbot-basic", ["e1"])
        assert not game.start_project("chatbot-basic", ["e1"])

    def test_cannot_afford(self):
        g = Game(state=replace(new_game_state(money=100), employees=[employee()]), rng=constant(0.5))
        assert not g.start_project("chatbot-basic", ["e1"])
        assert g.state.money == 100

    def test_update_project(self, game):
        game.hire_employee(employee())
        game.start_project("chatbot-basic", ["e1"])
        pid = game.state.projects[0].id
        assert game.update_project(pid, progress=15)
        assert game.state.projects[0].progress == 15
        assert not game.update_project("missing", progress=1)
        assert not game.update_project(pid, colour="red")

    def test_update_project_team_checked(self, game):
        game.hire_employee(employee("e1"))
        game.hire_employee(employee("e2"))
        game.start_project("chatbot-basic", ["e1"])
        game.start_project("chatbot-basic", ["e2"])
        first, second = (p.id for p in game.state.projects)
        game.drain_notifications()

        assert not game.update_project(first, team=["e1", "e1"])
        assert not game.update_project(first, team=["e1", "e2"])
        assert not game.update_project(first, team=["ghost"])
        assert [n.type for n in game.drain_notifications()] == ["error"] * 3
        assert game.state.projects[0].team == ["e1"]

        # Keeping its own members is fine
        assert game.update_project(first, team=["e1"])
        game.fire_employee("e2")
        assert not game.update_project(first, team=["e1", "e2"])
        game.hire_employee(employee("e3"))
        assert game.update_project(first, team=["e1", "e3"])
        assert game.state.projects[0].team == ["e1", "e3"]


class TestResearchActions:

    def test_start_research(self, game):
        node = game.state.research_node("transformer-basics")
        assert game.start_research("transformer-basics")
        assert game.state.research_node("transformer-basics").progress == 1
        assert game.state.money == 100000 - node.cost
        assert not game.start_research("transformer-basics")

    def test_locked_research_rejected(self, game):
        assert not game.start_research("transformer-advanced")

    def test_complete_research_unlocks(self, game):
        assert game.complete_research("transformer-basics")
        assert game.state.research_node("transformer-advanced").unlocked
        assert "transformer-basics" in game.state.unlocked_technologies
        assert "image-classifier" in game.state.unlocked_project_types
        assert "research-first" in game.state.unlocked_achievements

    def test_update_research(self, game):
        assert game.update_research("transformer-basics", 7)
        assert game.state.research_node("transformer-basics").progress == 7
        assert not game.update_research("nope", 1)


class TestOfficeActions:

    def test_new_game_office(self, game):
        office = game.state.office
        assert [r.type_id for r in office.rooms] == ["dev_pit"]
        assert office.installed_upgrades[0].upgrade_id == "basic_desks"

    def test_place_room(self, game):
        assert game.place_room("break_room", 2, 0)
        assert len(game.state.office.rooms) == 2
        assert game.state.money == 97000

    def test_overlap_rejected(self, game):
        assert not game.place_room("break_room", 1, 0)
        assert not game.place_room("break_room", 3, 0)
        assert game.state.money == 100000

    def test_office_size_requirement(self, game):
        assert not game.place_room("gym", 2, 0)

    def test_room_limit(self, game):
        assert game.place_room("phone_booth", 2, 0)
        assert game.place_room("phone_booth", 3, 0)
        assert not game.place_room("phone_booth", 2, 2)
        assert game.drain_notifications()[-1].message == "Office is full (3 rooms max)"

    def test_remove_room_refunds_half(self, game):
        assert game.remove_room("room-1")
        assert game.state.office.rooms == []
        assert game.state.money == 102500

    def test_upgrade_room(self, game):
        assert game.upgrade_room("room-1")
        assert game.state.office.rooms[0].level == 2
        assert game.state.money == 100000 - 3750
        assert "room-upgrade" in game.state.unlocked_achievements

        assert game.upgrade_room("room-1")
        assert game.state.money == 100000 - 3750 - 7500
        assert not game.upgrade_room("room-1")

    def test_slot_upgrades(self, game):
        assert game.install_upgrade("corner_1", "coffee_corner")
        assert game.state.money == 98500
        assert not game.install_upgrade("corner_1", "snack_bar")
        assert not game.install_upgrade("closet", "coffee_corner")
        assert not game.install_upgrade("nowhere", "coffee_corner")

        assert game.upgrade_slot("corner_1")
        assert game.state.money == 98500 - 900
        assert not game.upgrade_slot("main_work")

        assert game.remove_slot_upgrade("main_work")
        assert game.state.money == 98500 - 900 + 1000
        assert not game.remove_slot_upgrade("main_work")

    def test_upgrade_office_size(self, game):
        assert game.upgrade_office_size()
        office = game.state.office
        assert office.size == "small"
        assert office.rent == 1500
        assert (office.grid_width, office.grid_height) == (6, 4)
        assert game.state.money == 90000

    def test_legacy_upgrade_counter(self, game):
        assert game.upgrade_office("coffeeMachines")
        assert game.state.office.upgrades["coffeeMachines"] == 1
        assert game.state.money == 99500
        assert not game.upgrade_office("hot_tub")


class TestEvents:

    def test_vc_funding_choice(self, game):
        assert game.trigger_event("vc-funding")
        assert game.active_event().id == "vc-funding"
        assert game.handle_event_choice("vc-funding", "accept")

        assert game.state.money == 150000
        assert game.state.reputation == -5
        assert game.state.active_event_id is None
        assert game.state.event_history == ["vc-funding"]

    def test_only_one_event_at_a_time(self, game):
        game.trigger_event("vc-funding")
        game.drain_notifications()
        assert not game.trigger_event("safety-scandal")
        assert game.state.active_event_id == "vc-funding"
        notes = game.drain_notifications()
        assert notes[0].type == "error"
        assert notes[0].message == "Another event is already in progress"

    def test_ineligible_event_reports_error(self, game):
        game.add_money(200000)
        game.drain_notifications()
        assert not game.trigger_event("vc-funding")
        assert game.state.active_event_id is None
        assert game.drain_notifications()[0].type == "error"

    def test_builtin_catalog_lookup(self):
        assert find_event(GAME_EVENTS, "vc-funding") is get_event("vc-funding")
        assert find_event(GAME_EVENTS, "nope") is None
        assert find_event([poach_event()], "poach").title == "Poached!"
        assert find_event([poach_event()], "vc-funding") is None

    def test_wrong_event_or_choice(self, game):
        assert not game.handle_event_choice("vc-funding", "accept")
        game.trigger_event("vc-funding")
        assert not game.handle_event_choice("vc-funding", "haggle")
        assert game.state.active_event_id == "vc-funding"

    def test_fire_and_morale_effects(self):
        staff = [employee("a", morale=60), employee("b", morale=95)]
        g = Game(state=bare_state(employees=staff), rng=constant(0.0), event_catalog=[poach_event()])
        assert g.trigger_event("poach")
        assert g.handle_event_choice("poach", "let-go")
        assert [e.id for e in g.state.employees] == ["b"]
        assert g.state.employees[0].morale == 100
        assert any(n.message == "Dev a left for a rival lab" for n in g.drain_notifications())


class TestPrestige:

    def test_prestige_reset(self, game):
        game.state = replace(game.state, total_projects_completed=5, days_played=10,
                             total_revenue_ever=100000, legacy_points=3)
        gain = game.prestige_reset()
        assert gain == 17
        assert game.state.prestige_level == 1
        assert game.state.legacy_points == 20
        assert game.state.money == 110000
        assert game.state.days_played == 0
        assert "prestige" in game.state.unlocked_achievements


class TestSaveLoad:

    def test_round_trip(self, tmp_path):
        store = SaveStore(str(tmp_path / "save.db"))
        g = Game(rng=constant(0.5), store=store)
        g.hire_employee(employee())
        g.start_project("chatbot-basic", ["e1"])
        g.set_game_speed(1)
        for _ in range(3):
            g.advance_day()
        assert g.save_game()

        other = Game(store=store)
        assert other.load_game()
        assert other.state.to_dict() == g.state.to_dict()
        assert other.state.days_played == 3

    def test_missing_save(self, tmp_path):
        g = Game(store=SaveStore(str(tmp_path / "empty.db")))
        before = g.state
        assert not g.load_game()
        assert g.state is before

    def test_unreadable_save(self, tmp_path):
        store = SaveStore(str(tmp_path / "bad.db"))
        store.save("aiLabTycoonSave", {"employees": [{"name": "no id"}]})
        g = Game(store=store)
        assert not g.load_game()
        assert g.state.employees == []
