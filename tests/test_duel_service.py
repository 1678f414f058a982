"""Tests for duel matchmaking, round resolution and winner determination."""

import threading
from collections import Counter
from datetime import datetime

import pytest

from absurdle.engine import evaluate, round_score
from absurdle.errors import NotFoundError, StateError, UnknownPlayerError, ValidationError
from absurdle.models.duel import Player
from absurdle.models.game import GuessRecord
from absurdle.services.duel_service import DuelService, determine_winner
from absurdle.services.lobby_service import LobbyService
from absurdle.services.notifier import GAME_COMPLETED, GAME_STARTED, OPPONENT_ROUND_UPDATE, ROUND_COMPLETED
from absurdle.services.store import TTLStore

from conftest import RecordingNotifier

WORDS = ["apple", "girls", "sunny"]


def make_service(max_trials=3, store=None, notifier=None):
    return DuelService(store or TTLStore(), LobbyService(), WORDS, notifier, max_trials=max_trials)


def start_duel(service):
    first = service.join_duel("alice")
    second = service.join_duel("bob")
    return first.game_id, first.player_id, second.player_id


def player_state(state, player_id):
    return next(p for p in state["players"] if p["player_id"] == player_id)


class TestMatchmaking:
    def setup_method(self):
        self.service = make_service()

    def test_first_player_waits(self):
        result = self.service.join_duel("alice")
        assert result.waiting
        assert result.player_name == "alice"
        assert result.state["status"] == "Waiting"
        assert len(result.state["players"]) == 1
        assert self.service.lobby.waiting_count() == 1

    def test_second_player_is_matched(self):
        first = self.service.join_duel("alice")
        second = self.service.join_duel("bob")
        assert not second.waiting
        assert second.game_id == first.game_id
        assert second.player_id != first.player_id
        assert second.state["status"] == "InProgress"
        assert [p["player_name"] for p in second.state["players"]] == ["alice", "bob"]
        assert self.service.lobby.waiting_count() == 0

    def test_third_player_waits_for_a_new_game(self):
        game_id, _, _ = start_duel(self.service)
        third = self.service.join_duel("carol")
        assert third.waiting
        assert third.game_id != game_id

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            self.service.join_duel("   ")

    def test_stale_waiting_entry_is_skipped(self, store, clock):
        service = make_service(store=store)
        stale = service.join_duel("alice")
        clock.advance(31 * 60)

        result = service.join_duel("bob")
        assert result.waiting
        assert result.game_id != stale.game_id
        assert service.lobby.waiting_count() == 1

    def test_state_never_contains_shared_answer(self):
        game_id, alice, bob = start_duel(self.service)
        self.service.submit_duel_guess(game_id, alice, "apple")
        self.service.submit_duel_guess(game_id, bob, "girls")

        state = self.service.get_duel_state(game_id)
        assert "shared_answer" not in state
        assert "sunny" not in repr(state)
        assert all("pending_guess" not in p for p in state["players"])

    def test_unknown_game(self):
        with pytest.raises(NotFoundError):
            self.service.get_duel_state("does-not-exist")

    def test_concurrent_joins_pair_everyone(self):
        barrier = threading.Barrier(10)
        results = []
        lock = threading.Lock()

        def join(name):
            barrier.wait()
            result = self.service.join_duel(name)
            with lock:
                results.append(result)

        threads = [threading.Thread(target=join, args=(f"player{i}",)) for i in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        per_game = Counter(result.game_id for result in results)
        assert sorted(per_game.values()) == [2] * 5
        assert sum(1 for result in results if not result.waiting) == 5
        assert self.service.lobby.waiting_count() == 0


class TestRoundResolution:
    def setup_method(self):
        self.notifier = RecordingNotifier()
        self.service = make_service(notifier=self.notifier)
        self.game_id, self.alice, self.bob = start_duel(self.service)

    def test_first_submission_waits(self):
        outcome = self.service.submit_duel_guess(self.game_id, self.alice, "apple")
        assert outcome.waiting_for_opponent
        assert outcome.feedback == []
        assert outcome.remaining_trials == 3

        state = self.service.get_duel_state(self.game_id)
        assert player_state(state, self.alice)["has_submitted_this_round"]
        assert player_state(state, self.alice)["guess_count"] == 0

    def test_second_submission_resolves_round(self):
        self.service.submit_duel_guess(self.game_id, self.alice, "apple")
        outcome = self.service.submit_duel_guess(self.game_id, self.bob, "girls")

        # Both guesses are scored against the same shared answer, sunny
        assert not outcome.waiting_for_opponent
        assert outcome.feedback == ["MISS", "MISS", "MISS", "MISS", "PRESENT"]
        assert outcome.opponent_guess == "apple"
        assert outcome.opponent_feedback == ["MISS"] * 5
        assert outcome.score == 1
        assert outcome.remaining_trials == 2
        assert not outcome.game_completed_for_me

        state = self.service.get_duel_state(self.game_id)
        assert state["status"] == "InProgress"
        for player in state["players"]:
            assert player["guess_count"] == 1
            assert not player["has_submitted_this_round"]

    def test_resolution_is_order_independent(self):
        other = make_service()
        other_game, other_alice, other_bob = start_duel(other)

        self.service.submit_duel_guess(self.game_id, self.alice, "apple")
        self.service.submit_duel_guess(self.game_id, self.bob, "girls")
        other.submit_duel_guess(other_game, other_bob, "girls")
        other.submit_duel_guess(other_game, other_alice, "apple")

        first = self.service.get_duel_state(self.game_id)
        second = other.get_duel_state(other_game)
        assert player_state(first, self.alice)["feedback"] == player_state(second, other_alice)["feedback"]
        assert player_state(first, self.bob)["feedback"] == player_state(second, other_bob)["feedback"]

    def test_resubmission_replaces_pending_guess(self):
        self.service.submit_duel_guess(self.game_id, self.alice, "apple")
        self.service.submit_duel_guess(self.game_id, self.alice, "crane")
        self.service.submit_duel_guess(self.game_id, self.bob, "girls")

        state = self.service.get_duel_state(self.game_id)
        assert player_state(state, self.alice)["guesses"] == ["crane"]

    def test_invalid_guess_leaves_round_untouched(self):
        with pytest.raises(ValidationError):
            self.service.submit_duel_guess(self.game_id, self.alice, "abc")
        state = self.service.get_duel_state(self.game_id)
        assert not player_state(state, self.alice)["has_submitted_this_round"]

    def test_unknown_player(self):
        with pytest.raises(UnknownPlayerError):
            self.service.submit_duel_guess(self.game_id, "intruder", "apple")

    def test_unknown_player_is_a_not_found_error(self):
        assert issubclass(UnknownPlayerError, NotFoundError)

    def test_unknown_game(self):
        with pytest.raises(NotFoundError):
            self.service.submit_duel_guess("does-not-exist", self.alice, "apple")

    def test_waiting_game_rejects_guesses(self):
        lonely = self.service.join_duel("carol")
        with pytest.raises(StateError):
            self.service.submit_duel_guess(lonely.game_id, lonely.player_id, "apple")


class TestGameEnd:
    def setup_method(self):
        self.notifier = RecordingNotifier()
        self.service = make_service(notifier=self.notifier)
        self.game_id, self.alice, self.bob = start_duel(self.service)
        self.service.submit_duel_guess(self.game_id, self.alice, "apple")
        self.service.submit_duel_guess(self.game_id, self.bob, "girls")

    def test_solver_wins_and_game_ends_for_both(self):
        self.service.submit_duel_guess(self.game_id, self.alice, "sunny")
        outcome = self.service.submit_duel_guess(self.game_id, self.bob, "crane")

        assert outcome.game_completed_for_me
        assert not outcome.won
        assert outcome.winner_id == self.alice

        state = self.service.get_duel_state(self.game_id)
        assert state["status"] == "Completed"
        assert state["winner_id"] == self.alice
        assert all(p["finished"] for p in state["players"])

        with pytest.raises(StateError):
            self.service.submit_duel_guess(self.game_id, self.alice, "apple")

    def test_solver_resolving_the_round_wins(self):
        self.service.submit_duel_guess(self.game_id, self.bob, "crane")
        outcome = self.service.submit_duel_guess(self.game_id, self.alice, "sunny")
        assert outcome.correct
        assert outcome.won
        assert outcome.score == 10

    def test_both_solve_same_round_is_a_tie(self):
        self.service.submit_duel_guess(self.game_id, self.alice, "sunny")
        outcome = self.service.submit_duel_guess(self.game_id, self.bob, "sunny")
        assert outcome.correct
        assert outcome.game_completed_for_me
        assert not outcome.won
        assert outcome.winner_id is None
        assert self.service.get_duel_state(self.game_id)["status"] == "Completed"

    def test_trials_exhausted_best_score_wins(self):
        # crane vs sunny scores 2 (one hit), moist vs sunny scores 1
        self.service.submit_duel_guess(self.game_id, self.alice, "crane")
        self.service.submit_duel_guess(self.game_id, self.bob, "moist")
        self.service.submit_duel_guess(self.game_id, self.alice, "crane")
        outcome = self.service.submit_duel_guess(self.game_id, self.bob, "moist")

        assert outcome.game_completed_for_me
        assert outcome.remaining_trials == 0
        assert outcome.winner_id == self.alice
        assert self.service.get_duel_state(self.game_id)["status"] == "Completed"

    def test_game_completed_is_broadcast(self):
        self.service.submit_duel_guess(self.game_id, self.alice, "sunny")
        self.service.submit_duel_guess(self.game_id, self.bob, "crane")

        completed = [payload for game_id, event, payload in self.notifier.game_events if event == GAME_COMPLETED]
        assert len(completed) == 1
        assert completed[0]["game_id"] == self.game_id
        assert completed[0]["winner_id"] == self.alice
        assert "sunny" not in repr(completed[0]["players"])


class TestNotifications:
    def setup_method(self):
        self.notifier = RecordingNotifier()
        self.service = make_service(notifier=self.notifier)
        self.game_id, self.alice, self.bob = start_duel(self.service)
        self.service.attach_connection(self.game_id, self.alice, "sid-alice")
        self.service.attach_connection(self.game_id, self.bob, "sid-bob")

    def test_game_started_broadcast_on_attach(self):
        started = [event for game_id, event, _ in self.notifier.game_events if event == GAME_STARTED]
        assert len(started) == 2

    def test_no_game_started_while_waiting(self):
        notifier = RecordingNotifier()
        service = make_service(notifier=notifier)
        waiting = service.join_duel("carol")
        service.attach_connection(waiting.game_id, waiting.player_id, "sid-carol")
        assert notifier.game_events == []

    def test_attach_unknown_player(self):
        with pytest.raises(UnknownPlayerError):
            self.service.attach_connection(self.game_id, "intruder", "sid-x")

    def test_waiting_player_learns_round_result(self):
        self.service.submit_duel_guess(self.game_id, self.alice, "apple")
        assert self.notifier.player_events == []

        self.service.submit_duel_guess(self.game_id, self.bob, "girls")

        alice_events = dict(self.notifier.events_for("sid-alice"))
        assert set(alice_events) == {OPPONENT_ROUND_UPDATE, ROUND_COMPLETED}
        assert alice_events[OPPONENT_ROUND_UPDATE]["opponent_name"] == "bob"
        assert alice_events[OPPONENT_ROUND_UPDATE]["feedback_colors"] == ["MISS", "MISS", "MISS", "MISS", "PRESENT"]
        assert alice_events[ROUND_COMPLETED]["my_feedback"] == ["MISS"] * 5
        assert alice_events[ROUND_COMPLETED]["opponent_guess"] == "girls"

        bob_events = dict(self.notifier.events_for("sid-bob"))
        assert set(bob_events) == {ROUND_COMPLETED}
        assert bob_events[ROUND_COMPLETED]["my_guess"] == "girls"


class TestConcurrentSubmission:
    def test_simultaneous_guesses_resolve_exactly_once(self):
        for _ in range(10):
            service = make_service()
            game_id, alice, bob = start_duel(service)
            barrier = threading.Barrier(2)
            outcomes = []
            lock = threading.Lock()

            def submit(player_id, guess):
                barrier.wait()
                outcome = service.submit_duel_guess(game_id, player_id, guess)
                with lock:
                    outcomes.append(outcome)

            threads = [
                threading.Thread(target=submit, args=(alice, "apple")),
                threading.Thread(target=submit, args=(bob, "girls")),
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            assert sorted(o.waiting_for_opponent for o in outcomes) == [False, True]
            state = service.get_duel_state(game_id)
            assert all(p["guess_count"] == 1 for p in state["players"])


def finished_player(player_id, guesses, answer="sunny"):
    player = Player(player_id=player_id, display_name=player_id, finished=True)
    for round_number, guess in enumerate(guesses, start=1):
        feedback = evaluate(guess, answer)
        player.history.append(GuessRecord(guess=guess, feedback=feedback, submitted_at=datetime(2024, 1, 1)))
        player.guess_count = round_number
        score = round_score(feedback)
        if score > player.best_score:
            player.best_score = score
            player.best_round = round_number
    return player


class TestDetermineWinner:
    def test_only_solver_wins(self):
        a = finished_player("a", ["apple", "sunny"])
        b = finished_player("b", ["apple", "crane"])
        assert determine_winner([a, b]) == "a"
        assert determine_winner([b, a]) == "a"

    def test_earlier_solve_wins(self):
        a = finished_player("a", ["apple", "sunny"])
        b = finished_player("b", ["sunny"])
        assert determine_winner([a, b]) == "b"

    def test_same_round_solve_ties(self):
        a = finished_player("a", ["apple", "sunny"])
        b = finished_player("b", ["girls", "sunny"])
        assert determine_winner([a, b]) is None

    def test_higher_best_score_wins(self):
        a = finished_player("a", ["apple", "crane"])
        b = finished_player("b", ["apple", "girls"])
        assert determine_winner([a, b]) == "a"

    def test_earlier_best_round_breaks_score_tie(self):
        a = finished_player("a", ["apple", "girls"])
        b = finished_player("b", ["girls", "apple"])
        assert determine_winner([a, b]) == "b"

    def test_full_tie(self):
        a = finished_player("a", ["apple", "girls"])
        b = finished_player("b", ["apple", "girls"])
        assert determine_winner([a, b]) is None


class TestLockRelease:
    def test_abandoned_duels_release_locks_on_sweep(self, store, clock):
        service = make_service(store=store)
        for _ in range(50):
            game_id, alice, bob = start_duel(service)
            service.submit_duel_guess(game_id, alice, "apple")
            service.submit_duel_guess(game_id, bob, "girls")
        assert len(service._locks) == 50

        clock.advance(31 * 60)
        assert store.sweep_expired() == 50
        assert len(service._locks) == 0

    def test_stale_waiting_game_leaves_no_lock(self, store, clock):
        service = make_service(store=store)
        service.join_duel("alice")
        clock.advance(31 * 60)
        store.sweep_expired()

        service.join_duel("bob")
        assert len(service._locks) == 0

    def test_unknown_game_leaves_no_lock(self):
        service = make_service()
        with pytest.raises(NotFoundError):
            service.submit_duel_guess("does-not-exist", "nobody", "apple")
        assert len(service._locks) == 0
