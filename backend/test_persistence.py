"""
Unit tests for the save store, the KPI log and save loading
"""

import sqlite3
from dataclasses import replace
from datetime import date

import pytest

from game import new_game_state, state_from_save
from persistence import SaveStore, init_db, latest_kpis, log_day


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "test.db")


class TestSaveStore:

    def test_save_and_load(self, db):
        store = SaveStore(db)
        store.save("slot", {"money": 5, "daysPlayed": 2})
        assert store.load("slot") == {"money": 5, "daysPlayed": 2}

    def test_overwrite(self, db):
        store = SaveStore(db)
        store.save("slot", {"money": 1})
        store.save("slot", {"money": 2})
        assert store.load("slot") == {"money": 2}

    def test_missing_key(self, db):
        assert SaveStore(db).load("nothing") is None

    def test_corrupt_payload(self, db):
        store = SaveStore(db)
        conn = sqlite3.connect(db)
        conn.execute("INSERT INTO saves (key, payload) VALUES (?, ?)", ("slot", "{not json"))
        conn.commit()
        conn.close()
        assert store.load("slot") is None


class TestKpiLog:

    def test_log_and_read_back(self, db):
        init_db(db)
        state = replace(new_game_state(), days_played=3, current_date=date(2024, 1, 4), revenue_this_day=750)
        log_day(state, db)

        rows = latest_kpis(1, db)
        assert len(rows) == 1
        assert rows[0]["day"] == 3
        assert rows[0]["date"] == "2024-01-04"
        assert rows[0]["revenue"] == 750
        assert rows[0]["phase"] == "startup"

    def test_newest_first(self, db):
        init_db(db)
        for day in (1, 2, 3):
            log_day(replace(new_game_state(), days_played=day), db)
        assert [r["day"] for r in latest_kpis(2, db)] == [3, 2]

    def test_relogging_a_day_replaces_it(self, db):
        init_db(db)
        log_day(replace(new_game_state(), days_played=1, money=10), db)
        log_day(replace(new_game_state(), days_played=1, money=20), db)
        rows = latest_kpis(10, db)
        assert len(rows) == 1
        assert rows[0]["money"] == 20


class TestStateFromSave:

    def test_missing_keys_take_defaults(self):
        state = state_from_save({"money": 5, "daysPlayed": 10})
        assert state.money == 5
        assert state.days_played == 10
        assert state.policy == "balanced"
        assert len(state.research_nodes) == len(new_game_state().research_nodes)
        assert state.office.rooms[0].type_id == "dev_pit"

    def test_challenges_follow_saved_day(self):
        state = state_from_save({"daysPlayed": 10})
        assert state.daily_challenge.id == "daily-10"
        assert state.weekly_challenge.id == "weekly-1"
        assert state.daily_challenge_day_seed == 10
        assert state.weekly_challenge_week_seed == 1

    def test_timestamp_dates_accepted(self):
        state = state_from_save({"currentDate": "2024-03-05T12:00:00.000Z"})
        assert state.current_date == date(2024, 3, 5)

    def test_round_trip(self):
        state = replace(new_game_state(), money=1234, reputation=7, days_played=4, policy="wellness")
        assert state_from_save(state.to_dict()).to_dict() == state.to_dict()

    def test_null_values_take_defaults(self):
        state = state_from_save({
            "money": None,
            "daysPlayed": None,
            "dailyChallengeProgress": None,
            "eventHistory": None,
            "unlockedTechnologies": None,
            "revenueHistory": None,
        })
        fresh = new_game_state()
        assert state.money == fresh.money
        assert state.days_played == 0
        assert state.daily_challenge_progress == {}
        assert state.event_history == []
        assert state.unlocked_technologies == fresh.unlocked_technologies
        assert state.revenue_history == []

    def test_rejects_non_object(self):
        with pytest.raises(TypeError):
            state_from_save(["not", "a", "save"])
