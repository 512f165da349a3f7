"""
Unit tests for the tabular Q-learning agent.
"""

import pytest

from tabular_rl.othello.agent import QAgent
from tabular_rl.othello.board import WHITE, Board

START = Board().get_state()


class TestQValueLookup:
    """Test suite for value table reads."""

    def test_absent_state_reads_zero(self):
        """Test that an unknown state reads as 0 without creating an entry."""
        agent = QAgent("player1")
        assert agent.get_q_value(START, "D3") == 0.0
        assert agent.q_values == {}

    def test_absent_move_reads_zero(self):
        """Test that an unknown move in a known state reads as 0."""
        agent = QAgent("player1", q_values={START: {"D3": 0.5}})
        assert agent.get_q_value(START, "D3") == 0.5
        assert agent.get_q_value(START, "C4") == 0.0

    def test_max_q_over_legal_moves_only(self):
        """Test that recorded values for illegal moves are ignored."""
        agent = QAgent(
            "player1",
            q_values={START: {"D3": 0.2, "F5": 0.7, "A1": 5.0}},
        )
        assert agent.get_max_q_value(START, Board()) == pytest.approx(0.7)

    def test_max_q_defaults_missing_moves_to_zero(self):
        """Test that legal moves with no stored value count as 0 in the maximum."""
        agent = QAgent("player1", q_values={START: {"D3": -0.4, "C4": -0.2}})
        assert agent.get_max_q_value(START, Board()) == 0.0

    def test_max_q_is_zero_without_legal_moves(self):
        """Test that maxQ is 0 when the side to move has no legal move."""
        full = Board.from_state("1" * 32 + "2" * 32)
        agent = QAgent("player1", q_values={full.get_state(): {"A1": 3.0}})
        assert agent.get_max_q_value(full.get_state(), full) == 0.0

    def test_max_q_uses_board_turn_context(self):
        """Test that maxQ ranges over the moves of the board's side to move."""
        board = Board()
        board.current_player = WHITE
        agent = QAgent("player2", q_values={START: {"D3": 0.9, "E3": 0.3}})
        assert agent.get_max_q_value(START, board) == pytest.approx(0.3)


class TestQValueUpdate:
    """Test suite for the terminal Bellman update."""

    def test_update_from_empty_table(self):
        """Q = 0 + 0.1 * (1 + 0.9 * 0 - 0) on a terminal board."""
        agent = QAgent("player1", alpha=0.1, gamma=0.9)
        final = Board.from_state("1" * 40 + "2" * 24)

        new_q = agent.update_q_value(START, "D3", 1, final.get_state(), final)

        assert new_q == pytest.approx(0.1)
        assert agent.get_q_value(START, "D3") == pytest.approx(0.1)

    def test_update_uses_discounted_max_of_next_state(self):
        """Test the update against a hand-computed Bellman target."""
        board = Board()
        board.make_move("D3")
        after = board.get_state()
        agent = QAgent(
            "player1",
            alpha=0.5,
            gamma=0.9,
            q_values={START: {"D3": 0.2}, after: {"C3": 0.4, "E3": 0.1}},
        )

        new_q = agent.update_q_value(START, "D3", -1, after, board)

        expected = 0.2 + 0.5 * (-1 + 0.9 * 0.4 - 0.2)
        assert new_q == pytest.approx(expected)
        assert agent.get_q_value(START, "D3") == pytest.approx(expected)

    def test_update_creates_entries_lazily(self):
        """Test that an update creates the state and move entries it writes."""
        agent = QAgent("player1")
        final = Board.from_state("2" * 64)
        agent.update_q_value(START, "C4", 0, final.get_state(), final)
        assert agent.q_values == {START: {"C4": 0.0}}

    def test_repeated_updates_converge_towards_reward(self):
        """Test that repeated terminal updates approach the reward from below."""
        agent = QAgent("player1", alpha=0.1, gamma=0.9)
        final = Board.from_state("1" * 64)
        values = [
            agent.update_q_value(START, "D3", 1, final.get_state(), final)
            for _ in range(50)
        ]
        assert values == sorted(values)
        assert values[-1] == pytest.approx(1 - 0.9 ** 50)
        assert values[-1] < 1.0

    @pytest.mark.parametrize("state, action", [(None, "D3"), (START, None), (None, None)])
    def test_update_without_trace_is_noop(self, state, action):
        """Test that an update with no recorded state or action changes nothing."""
        agent = QAgent("player1")
        assert agent.update_q_value(state, action, 1, START, Board()) is None
        assert agent.q_values == {}


class TestTrace:
    """Test suite for the per-episode decision trace."""

    def test_new_agent_has_no_trace(self):
        """Test that a fresh agent has no recorded decision."""
        agent = QAgent("player1")
        assert not agent.has_trace
        assert agent.current_state is None

    def test_record_and_reset(self):
        """Test that recorded trace fields are cleared by reset_trace."""
        agent = QAgent("player1")
        agent.record_action(START, "D3")
        agent.record_result("1" * 64)
        assert agent.has_trace
        assert (agent.last_state, agent.last_action, agent.current_state) == (
            START,
            "D3",
            "1" * 64,
        )

        agent.reset_trace()

        assert not agent.has_trace
        assert agent.current_state is None

    def test_num_entries_counts_state_move_pairs(self):
        """Test that num_entries counts every stored (state, move) value."""
        agent = QAgent("player1", q_values={START: {"D3": 0.25, "C4": 0.1}, "1" * 64: {"A1": 0.0}})
        assert agent.num_entries() == 3
