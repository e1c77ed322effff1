"""
connect4_events.game - Core rules for Connect Four

This package contains the board, the commands and events, and the
validate/project cycle that derives game state from events.
"""

from connect4_events.game.board import (Board, ColumnFullError, ProjectionError, check_game_over,
                                        empty_board, project_board)
from connect4_events.game.events import (CreateGame, GameCreated, PlaceToken, Player, TokenPlaced,
                                         event_from_dict, event_to_dict)
from connect4_events.game.rules import (CommandHandler, CommandResult, Game, Games, GameStatus, Rejection,
                                        can_create_game, command_processing, event_processing,
                                        is_valid_move, replay_events)

__all__ = [
    'Board', 'ColumnFullError', 'ProjectionError', 'check_game_over', 'empty_board', 'project_board',
    'CreateGame', 'GameCreated', 'PlaceToken', 'Player', 'TokenPlaced', 'event_from_dict', 'event_to_dict',
    'CommandHandler', 'CommandResult', 'Game', 'Games', 'GameStatus', 'Rejection',
    'can_create_game', 'command_processing', 'event_processing', 'is_valid_move', 'replay_events',
]
