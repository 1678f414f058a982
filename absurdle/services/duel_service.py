"""
Duel Service

Contains the two-player duel logic: matchmaking, simultaneous round
resolution against one shared deferred answer, synchronized game ending and
winner determination.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..engine import evaluate, filter_candidates, is_solved, normalize_guess, round_score, select_shared_answer
from ..errors import DegenerateCandidateError, NotFoundError, StateError, UnknownPlayerError, ValidationError
from ..models.duel import DuelGame, DuelGuessOutcome, DuelJoinResult, DuelStatus, Player
from ..models.game import Feedback, GuessRecord
from ..utils.game_logger import game_logger
from .lobby_service import LobbyService
from .notifier import (
    GAME_COMPLETED, GAME_STARTED, OPPONENT_ROUND_UPDATE, ROUND_COMPLETED, Notifier, NullNotifier
)
from .store import KeyedLock, TTLStore

DUEL_KEY_PREFIX = "duel:"

# (target kind, target, event, payload); target kind is "player" or "game"
Delivery = Tuple[str, str, str, Dict[str, Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _statuses(feedback: Feedback) -> List[str]:
    return [status.value for status in feedback]


def solved_round(player: Player) -> Optional[int]:
    """1-based round of the player's first all-HIT guess, or None."""
    for index, record in enumerate(player.history):
        if is_solved(record.feedback):
            return index + 1
    return None


def determine_winner(players: List[Player]) -> Optional[str]:
    """
    Picks the duel winner once both players have finished.

    Rules:
    1. Exactly one player solved the word: that player wins.
    2. Both solved it: the earlier round wins; the same round is a tie.
    3. Neither solved it: higher best score wins, then the earlier best
       round; fully equal is a tie.

    Returns:
        The winning player id, or None for a tie
    """
    if len(players) != 2:
        return None

    first, second = players
    first_solved = solved_round(first)
    second_solved = solved_round(second)

    if first_solved is not None and second_solved is None:
        return first.player_id
    if second_solved is not None and first_solved is None:
        return second.player_id
    if first_solved is not None and second_solved is not None:
        if first_solved < second_solved:
            return first.player_id
        if second_solved < first_solved:
            return second.player_id
        return None

    if first.best_score != second.best_score:
        return first.player_id if first.best_score > second.best_score else second.player_id
    if first.best_round != second.best_round:
        return first.player_id if first.best_round < second.best_round else second.player_id
    return None


class DuelService:
    """
    Two-player duel coordinator.

    This class handles:
    - Matchmaking through the lobby queue
    - Holding each player's guess until the opponent has also submitted
    - Choosing one shared answer that is hardest for both players' guesses
    - Ending the game for both players at once and picking the winner
    - Pushing round and game results through the notifier
    """

    def __init__(self,
                 store: TTLStore,
                 lobby: LobbyService,
                 word_list: List[str],
                 notifier: Optional[Notifier] = None,
                 max_trials: int = 6,
                 game_timeout_minutes: int = 30,
                 now: Callable[[], datetime] = _utcnow):
        self.store = store
        self.lobby = lobby
        self.word_list = list(word_list)
        self.notifier = notifier or NullNotifier()
        self.max_trials = max_trials
        self.game_ttl_seconds = game_timeout_minutes * 60
        self.now = now
        self._locks = KeyedLock()
        self.store.add_expiry_listener(self._locks.discard)

    @staticmethod
    def _key(game_id: str) -> str:
        return f"{DUEL_KEY_PREFIX}{game_id}"

    def _load(self, game_id: str) -> DuelGame:
        game = self.store.get(self._key(game_id)) if game_id else None
        if game is None:
            self._locks.discard(self._key(game_id))
            raise NotFoundError("Game not found")
        return game

    def _save(self, game: DuelGame) -> None:
        self.store.set(self._key(game.game_id), game, self.game_ttl_seconds)

    def join_duel(self, player_name: str) -> DuelJoinResult:
        """
        Matches the player with whoever is waiting, or parks them in a new game.

        Args:
            player_name: Display name shown to the opponent

        Returns:
            DuelJoinResult; `waiting` is True when no opponent was available
        """
        player_name = (player_name or "").strip() if isinstance(player_name, str) else ""
        if not player_name:
            raise ValidationError("Player name is required")

        player_id = str(uuid.uuid4())

        with self.lobby.matchmaking() as queue:
            entry = queue.dequeue()
            if entry is not None:
                key = self._key(entry.game_id)
                with self._locks.hold(key):
                    game = self.store.get(key)
                    if game is not None and game.status == DuelStatus.WAITING and len(game.players) == 1:
                        game.players.append(Player(player_id=player_id, display_name=player_name))
                        game.status = DuelStatus.IN_PROGRESS
                        self._save(game)

                        game_logger.log_game_event(game.game_id, 'duel_started', player_id,
                                                   players=[p.display_name for p in game.players])
                        return DuelJoinResult(
                            game_id=game.game_id,
                            player_id=player_id,
                            player_name=player_name,
                            waiting=False,
                            state=game.sanitized(),
                        )

                if game is None:
                    self._locks.discard(key)
                # The waiting player's game expired; they are dropped, not re-queued
                game_logger.logger.warning(
                    f"Could not find waiting game {entry.game_id} for player {entry.player_id}, creating new game instead"
                )
                game_logger.log_game_event(entry.game_id, 'stale_waiting_entry', entry.player_id)

            game = DuelGame(
                game_id=str(uuid.uuid4()),
                max_trials=self.max_trials,
                created_at=self.now(),
                players=[Player(player_id=player_id, display_name=player_name)],
            )
            self._save(game)
            queue.join(player_id, game.game_id)

        game_logger.log_game_event(game.game_id, 'duel_created', player_id, player_name=player_name)

        return DuelJoinResult(
            game_id=game.game_id,
            player_id=player_id,
            player_name=player_name,
            waiting=True,
            state=game.sanitized(),
        )

    def get_duel_state(self, game_id: str) -> Dict[str, Any]:
        """Returns the sanitized game state (never the shared answer)."""
        return self._load(game_id).sanitized()

    def attach_connection(self, game_id: str, player_id: str, transport_ref: str) -> Dict[str, Any]:
        """
        Binds a push-channel handle to a player.

        Once the game is in progress with both players present, a
        game_started event is broadcast to the game room.
        """
        key = self._key(game_id)
        with self._locks.hold(key):
            game = self._load(game_id)
            player = game.find_player(player_id)
            if player is None:
                raise UnknownPlayerError("Player not found")
            player.transport_ref = transport_ref
            self._save(game)

        state = game.sanitized()
        if len(game.players) == 2 and game.status == DuelStatus.IN_PROGRESS:
            self.notifier.broadcast_to_game(game.game_id, GAME_STARTED, state)

        game_logger.logger.info(f"Player {player_id} connected to game {game_id}")
        return state

    def submit_duel_guess(self, game_id: str, player_id: str, raw_guess: str) -> DuelGuessOutcome:
        """
        Records a player's guess for the current round.

        The first submission of a round only parks the guess and returns
        waiting_for_opponent=True. The second submission resolves the round
        for both players and returns the resolved result to its caller; the
        other player learns the outcome through the notifier.

        Raises:
            ValidationError: Malformed guess
            NotFoundError: Unknown or expired game
            UnknownPlayerError: Player id not part of this game
            StateError: Game not in progress, or opponent missing
        """
        guess = normalize_guess(raw_guess)
        key = self._key(game_id)

        with self._locks.hold(key):
            game = self._load(game_id)

            player = game.find_player(player_id)
            if player is None:
                raise UnknownPlayerError("Player not found")

            if game.status != DuelStatus.IN_PROGRESS:
                raise StateError("Game is not in progress")

            opponent = game.opponent_of(player_id)
            if opponent is None:
                raise StateError("Opponent not found")

            # A resubmission before the opponent moves replaces the parked guess
            player.pending_guess = guess
            player.has_submitted_this_round = True

            if not opponent.has_submitted_this_round or not opponent.pending_guess:
                self._save(game)
                game_logger.logger.info(
                    f"Waiting for opponent {opponent.player_id} to submit guess in game {game_id}"
                )
                return DuelGuessOutcome(
                    waiting_for_opponent=True,
                    remaining_trials=max(game.max_trials - player.guess_count, 0),
                    score=player.best_score,
                    winner_id=game.winner_id,
                )

            outcome, deliveries = self._resolve_round(game, player, opponent)
            self._save(game)

        if game.status == DuelStatus.COMPLETED:
            self._locks.discard(key)

        self._deliver(deliveries)
        return outcome

    def _choose_shared_answer(self, game: DuelGame) -> str:
        pool = filter_candidates(self.word_list, *(p.history for p in game.players))
        guesses = [p.pending_guess for p in game.players]
        try:
            return select_shared_answer(guesses, pool)
        except DegenerateCandidateError:
            game_logger.logger.warning(
                f"No valid candidates found for game {game.game_id} - using first word from list"
            )
            return self.word_list[0]

    def _apply_round(self, player: Player, feedback: Feedback) -> None:
        player.history.append(GuessRecord(guess=player.pending_guess, feedback=feedback, submitted_at=self.now()))
        player.guess_count += 1

        score = round_score(feedback)
        if score > player.best_score:
            player.best_score = score
            player.best_round = player.guess_count

        player.clear_pending()

    def _resolve_round(self, game: DuelGame, player: Player,
                       opponent: Player) -> Tuple[DuelGuessOutcome, List[Delivery]]:
        """
        Resolves a round once both guesses are in. Runs under the game lock
        and only mutates the loaded copy; the caller commits it.

        The result depends only on the two guesses and prior histories, not on
        which player submitted last.
        """
        if not game.shared_answer:
            game.shared_answer = self._choose_shared_answer(game)
            game_logger.logger.info(f"Selected shared answer '{game.shared_answer}' for game {game.game_id}")

        feedback_by_player: Dict[str, Feedback] = {}
        for participant in game.players:
            feedback = evaluate(participant.pending_guess, game.shared_answer)
            feedback_by_player[participant.player_id] = feedback
            self._apply_round(participant, feedback)

        # Game ends for both players at once so the outcomes stay comparable
        any_solved = any(is_solved(feedback) for feedback in feedback_by_player.values())
        trials_exhausted = any(p.guess_count >= game.max_trials for p in game.players)
        if any_solved or trials_exhausted:
            for participant in game.players:
                participant.finished = True

        if all(p.finished for p in game.players):
            game.status = DuelStatus.COMPLETED
            game.winner_id = determine_winner(game.players)

        game_logger.log_game_event(
            game.game_id, 'round_resolved', player.player_id,
            round=player.guess_count, any_solved=any_solved, trials_exhausted=trials_exhausted
        )
        if game.status == DuelStatus.COMPLETED:
            game_logger.log_game_event(game.game_id, 'duel_completed', 'system', winner_id=game.winner_id)

        my_feedback = feedback_by_player[player.player_id]
        opponent_feedback = feedback_by_player[opponent.player_id]

        outcome = DuelGuessOutcome(
            waiting_for_opponent=False,
            feedback=_statuses(my_feedback),
            correct=is_solved(my_feedback),
            game_completed_for_me=player.finished,
            won=game.status == DuelStatus.COMPLETED and game.winner_id == player.player_id,
            remaining_trials=max(game.max_trials - player.guess_count, 0),
            score=player.best_score,
            opponent_guess=opponent.history[-1].guess,
            opponent_feedback=_statuses(opponent_feedback),
            winner_id=game.winner_id,
        )
        return outcome, self._round_deliveries(game, player, opponent, feedback_by_player)

    def _round_deliveries(self, game: DuelGame, resolver: Player, waiter: Player,
                          feedback_by_player: Dict[str, Feedback]) -> List[Delivery]:
        deliveries: List[Delivery] = []

        # The waiting player already got waiting_for_opponent; tell them how the resolver did
        if waiter.transport_ref:
            deliveries.append(('player', waiter.transport_ref, OPPONENT_ROUND_UPDATE, {
                'opponent_name': resolver.display_name,
                'round_number': resolver.guess_count,
                'feedback_colors': _statuses(feedback_by_player[resolver.player_id]),
                'opponent_score': resolver.best_score,
                'opponent_best_round': resolver.best_round,
                'opponent_finished': resolver.finished,
            }))

        for me, other in ((resolver, waiter), (waiter, resolver)):
            if not me.transport_ref:
                continue
            deliveries.append(('player', me.transport_ref, ROUND_COMPLETED, {
                'game_id': game.game_id,
                'my_feedback': _statuses(feedback_by_player[me.player_id]),
                'my_guess': me.history[-1].guess,
                'opponent_guess': other.history[-1].guess,
                'opponent_feedback': _statuses(feedback_by_player[other.player_id]),
                'my_score': me.best_score,
                'opponent_score': other.best_score,
                'game_completed_for_me': me.finished,
                'remaining_trials': max(game.max_trials - me.guess_count, 0),
            }))

        if game.status == DuelStatus.COMPLETED:
            deliveries.append(('game', game.game_id, GAME_COMPLETED, {
                'game_id': game.game_id,
                'winner_id': game.winner_id,
                'players': [
                    {
                        'player_id': p.player_id,
                        'player_name': p.display_name,
                        'score': p.best_score,
                        'best_round': p.best_round,
                        'guess_count': p.guess_count,
                        'finished': p.finished,
                    }
                    for p in game.players
                ],
            }))

        return deliveries

    def _deliver(self, deliveries: List[Delivery]) -> None:
        for kind, target, event, payload in deliveries:
            if kind == 'game':
                self.notifier.broadcast_to_game(target, event, payload)
            else:
                self.notifier.send_to_player(target, event, payload)

    def active_games_count(self) -> int:
        return self.store.count(DUEL_KEY_PREFIX)


# Global service instance
_duel_service = None


def get_duel_service() -> Optional[DuelService]:
    """Get the global duel service instance."""
    return _duel_service


def initialize_duel_service(store: TTLStore, lobby: LobbyService, word_list: List[str],
                            notifier: Optional[Notifier] = None, max_trials: int = 6,
                            game_timeout_minutes: int = 30) -> DuelService:
    """Initialize the global duel service instance."""
    global _duel_service
    _duel_service = DuelService(store, lobby, word_list, notifier, max_trials, game_timeout_minutes)
    return _duel_service
