"""
rules.py - Command validation, event projection and game state for Connect Four

This module provides:
1. The validators that decide whether a command is legal for the current state
2. The projections that fold events into the Games collection
3. command_processing / event_processing, the validate-then-apply cycle
4. CommandHandler, a locked single writer around that cycle

State is only ever changed by applying events; replaying a full event log from
an empty collection rebuilds the same games as applying each event as it was
produced.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional

from connect4_events.debug import debug
from connect4_events.game.board import Board, ProjectionError, check_game_over, empty_board, project_board
from connect4_events.game.events import (Command, CreateGame, GameCreated, GameEvent, PlaceToken, Player,
                                         TokenPlaced, utc_now)
from connect4_events.utils import Token, column_positions, is_valid_column

FIRST_TOKEN = Token.RED


class GameStatus(Enum):
    ONGOING = "ongoing"
    TERMINATED = "terminated"


class Rejection(Enum):
    """Why a command produced no event."""
    INVALID_MOVE = "invalid move"
    COLUMN_FULL = "column is full"
    GAME_NOT_FOUND = "game not found"
    DUPLICATE_PLAYER = "player already in an unfinished game"
    GAME_ALREADY_OVER = "game already over"


@dataclass
class Game:
    """Per-game state assembled from GameCreated and TokenPlaced events."""
    id: int
    player1: Player
    player2: Player
    board: Board = field(default_factory=empty_board)
    next_token: Token = FIRST_TOKEN
    moves: int = 0

    @property
    def players(self) -> List[Player]:
        return [self.player1, self.player2]

    def winner(self) -> Optional[Player]:
        return check_game_over(self.board, self.player1, self.player2)

    def status(self) -> GameStatus:
        return GameStatus.TERMINATED if self.winner() is not None else GameStatus.ONGOING

    def is_over(self) -> bool:
        return self.status() == GameStatus.TERMINATED

    def seat_of(self, player: Player) -> Optional[Player]:
        """
        Find the seated player with the same name.

        Returns:
            The player as seated in this game (with its token), or None
        """
        for seated in self.players:
            if seated.is_same_player(player):
                return seated
        return None

    def copy(self) -> 'Game':
        return Game(self.id, self.player1, self.player2, self.board.copy(), self.next_token, self.moves)


class Games:
    """
    All games known to the process, keyed by id.

    next_id is advanced by every GameCreated, so ids are never reused even
    when events are replayed from a log.
    """

    def __init__(self):
        self._games: Dict[int, Game] = {}
        self.next_id = 0

    def __len__(self) -> int:
        return len(self._games)

    def __contains__(self, game_id) -> bool:
        return game_id in self._games

    def __iter__(self) -> Iterator[Game]:
        return iter(self._games.values())

    def __getitem__(self, game_id: int) -> Game:
        return self._games[game_id]

    def get(self, game_id: int) -> Optional[Game]:
        return self._games.get(game_id)

    def ids(self) -> List[int]:
        return list(self._games)

    def insert(self, game: Game) -> None:
        self._games[game.id] = game

    def copy(self) -> 'Games':
        """Snapshot that later events applied to this collection do not touch."""
        snapshot = Games()
        snapshot._games = {game_id: game.copy() for game_id, game in self._games.items()}
        snapshot.next_id = self.next_id
        return snapshot

    def __eq__(self, other):
        if not isinstance(other, Games):
            return NotImplemented
        return self.next_id == other.next_id and self._games == other._games


# --- Validators ---

def is_valid_move(board: Board, command: PlaceToken) -> bool:
    """
    Check that the command's column still has room.

    Turn order and terminal status are not checked here.
    """
    if not is_valid_column(command.column):
        return False
    return any(board.is_empty_at(pos) for pos in column_positions(command.column))


def can_create_game(games: Games, command: CreateGame) -> bool:
    """
    Check that neither proposed player is seated in an unfinished game.

    Players of games that already have a winner may start a new one.
    """
    for game in games:
        if game.is_over():
            continue
        for proposed in (command.player1, command.player2):
            if game.seat_of(proposed) is not None:
                debug.debug(f"Player {proposed.name} is still playing game {game.id}", "rules")
                return False
    return True


# --- Projections ---

def project_next_color_to_play(current: Token, event: TokenPlaced) -> Token:
    return current.other()


def project_game_count(current: int, event: GameCreated) -> int:
    return max(current, event.id + 1)


def project_all_games(games: Games, event: GameEvent) -> None:
    """
    Fold one event into the games collection.

    Raises:
        ProjectionError: If the event does not fit the current state
        ValueError: If the event type is unknown
    """
    if isinstance(event, GameCreated):
        if event.id in games:
            debug.error(f"GameCreated reuses id {event.id}", "rules")
            raise ProjectionError(f"Game {event.id} already exists")
        games.insert(Game(id=event.id, player1=event.player1, player2=event.player2))
        games.next_id = project_game_count(games.next_id, event)
    elif isinstance(event, TokenPlaced):
        game = games.get(event.game)
        if game is None:
            debug.error(f"TokenPlaced for unknown game {event.game}", "rules")
            raise ProjectionError(f"Game {event.game} does not exist")
        project_board(game.board, event)
        game.next_token = project_next_color_to_play(game.next_token, event)
        game.moves += 1
    else:
        raise ValueError(f"Unknown event type {type(event).__name__}")


# --- Command processing ---

@dataclass(frozen=True)
class CommandResult:
    """Outcome of command_processing: an event to apply, or the reason there is none."""
    event: Optional[GameEvent] = None
    rejection: Optional[Rejection] = None

    @property
    def accepted(self) -> bool:
        return self.event is not None

    @classmethod
    def reject(cls, reason: Rejection) -> 'CommandResult':
        return cls(rejection=reason)


def _process_create_game(games: Games, command: CreateGame, now: datetime) -> CommandResult:
    if command.player1.is_same_player(command.player2):
        return CommandResult.reject(Rejection.DUPLICATE_PLAYER)
    if command.player1.token == command.player2.token:
        return CommandResult.reject(Rejection.INVALID_MOVE)
    if not can_create_game(games, command):
        return CommandResult.reject(Rejection.DUPLICATE_PLAYER)

    return CommandResult(GameCreated(id=games.next_id, player1=command.player1,
                                     player2=command.player2, created=now))


def _process_place_token(games: Games, command: PlaceToken, now: datetime) -> CommandResult:
    game = games.get(command.game)
    if game is None:
        return CommandResult.reject(Rejection.GAME_NOT_FOUND)
    if game.is_over():
        return CommandResult.reject(Rejection.GAME_ALREADY_OVER)

    seated = game.seat_of(command.player)
    if seated is None or seated.token != game.next_token:
        return CommandResult.reject(Rejection.INVALID_MOVE)
    if not is_valid_column(command.column):
        return CommandResult.reject(Rejection.INVALID_MOVE)
    if not is_valid_move(game.board, command):
        return CommandResult.reject(Rejection.COLUMN_FULL)

    return CommandResult(TokenPlaced(game=game.id, token=seated.token, column=command.column, created=now))


def command_processing(games: Games, command: Command, now: Optional[datetime] = None) -> CommandResult:
    """
    Decide whether a command becomes an event.

    Args:
        games: Current state; not modified
        command: CreateGame or PlaceToken
        now: Timestamp for the event (defaults to the current UTC time)

    Returns:
        CommandResult holding the event, or the rejection reason
    """
    now = now or utc_now()
    if isinstance(command, CreateGame):
        result = _process_create_game(games, command, now)
    elif isinstance(command, PlaceToken):
        result = _process_place_token(games, command, now)
    else:
        raise ValueError(f"Unknown command type {type(command).__name__}")

    if result.accepted:
        debug.debug(f"Accepted {type(command).__name__}: {result.event}", "rules")
    else:
        debug.debug(f"Rejected {type(command).__name__} ({result.rejection.value}): {command}", "rules")
    return result


def event_processing(games: Games, event: GameEvent) -> None:
    """
    Apply an accepted event to the games collection.

    Events must be applied at most once: a TokenPlaced applied twice stacks a
    second token in the column.
    """
    project_all_games(games, event)


def replay_events(events: Iterable[GameEvent], games: Optional[Games] = None) -> Games:
    """
    Rebuild state by folding an event log.

    Args:
        events: Events in the order they were produced
        games: Collection to fold into (a new empty one by default)

    Returns:
        The resulting games collection
    """
    games = Games() if games is None else games
    count = 0
    for event in events:
        event_processing(games, event)
        count += 1
    debug.debug(f"Replayed {count} events into {len(games)} games", "rules")
    return games


class CommandHandler:
    """
    Single writer for a games collection.

    Each call to execute() validates a command and applies the resulting event
    while holding one lock, so no two commands are judged against the same
    snapshot. An optional event log receives every accepted event before it is
    applied.
    """

    def __init__(self, games: Optional[Games] = None, event_log=None):
        self.games = Games() if games is None else games
        self.event_log = event_log
        self._lock = threading.Lock()

    @classmethod
    def from_log(cls, event_log) -> 'CommandHandler':
        """Create a handler whose state is replayed from an existing event log."""
        return cls(event_log.replay(), event_log)

    def execute(self, command: Command, now: Optional[datetime] = None) -> CommandResult:
        with self._lock:
            result = command_processing(self.games, command, now)
            if result.accepted:
                if self.event_log is not None:
                    self.event_log.append(result.event)
                event_processing(self.games, result.event)
            return result

    def snapshot(self) -> Games:
        with self._lock:
            return self.games.copy()
