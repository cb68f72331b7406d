"""
Unit tests for company statistics
"""

from stats import compute_company_stats
from game import new_game_state
from models import Employee, GameState


def employee(eid, morale, salary, development=0):
    return Employee(id=eid, name=eid, role="engineer", skills={"development": development},
                    salary=salary, morale=morale)


class TestCompanyStats:

    def test_empty_company(self):
        stats = compute_company_stats(GameState())
        assert stats["employees"] == 0.0
        assert stats["mean_morale"] == 0.0
        assert stats["monthly_payroll"] == 0.0
        assert stats["mean_development"] == 0.0
        assert stats["revenue_history_mean"] == 0.0
        assert stats["top_rival_share"] == 0.0
        assert stats["player_market_share"] == 100.0

    def test_team_spread(self):
        state = GameState(employees=[
            employee("a", 50, 1000, development=2),
            employee("b", 70, 2000, development=4),
            employee("c", 90, 6000, development=9),
        ])
        stats = compute_company_stats(state)
        assert stats["employees"] == 3.0
        assert abs(stats["mean_morale"] - 70.0) < 1e-9
        assert stats["median_morale"] == 70.0
        assert stats["min_morale"] == 50.0
        assert stats["monthly_payroll"] == 9000.0
        assert stats["median_salary"] == 2000.0
        assert abs(stats["mean_development"] - 5.0) < 1e-9
        assert stats["mean_research"] == 0.0

    def test_new_game_market(self):
        stats = compute_company_stats(new_game_state())
        assert stats["top_rival_share"] == 35.0
        assert stats["player_market_share"] == 0.0
        assert stats["research_completed"] == 0.0

    def test_history_means(self):
        state = GameState(revenue_history=[100, 200, 300], reputation_history=[1, 3])
        stats = compute_company_stats(state)
        assert abs(stats["revenue_history_mean"] - 200.0) < 1e-9
        assert abs(stats["reputation_history_mean"] - 2.0) < 1e-9
        assert stats["morale_history_mean"] == 0.0

    def test_all_values_are_floats(self):
        for value in compute_company_stats(new_game_state()).values():
            assert isinstance(value, float)
