#!/usr/bin/env python3
"""
run.py - Command line entry point for the Connect Four rules engine
"""

import argparse
import os
import sys

# Add the project root to Python path to ensure imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from connect4_events import __version__
from connect4_events.data import EventLog
from connect4_events.debug import debug, DebugLevel
from connect4_events.game import Game
from connect4_events.utils import COLS, CONNECT_N, ROWS

# --- Utility Functions ---

def configure_debug(args):
    """Configure the debug level from the environment, then from args."""
    debug.configure_from_env()
    if args.debug:
        debug.configure(level=DebugLevel.DEBUG)
    elif args.debug_level:
        debug.set_from_string(args.debug_level)


def describe_game(game: Game) -> str:
    """One summary line for a replayed game."""
    winner = game.winner()
    outcome = f"winner {winner.name} ({winner.token})" if winner else f"{game.next_token} to play"
    return (f"Game {game.id}: {game.player1.name} ({game.player1.token}) vs "
            f"{game.player2.name} ({game.player2.token}) - {game.moves} moves, "
            f"{game.status().value}, {outcome}")

# --- Command Handlers ---

def handle_replay(args) -> int:
    if not os.path.exists(args.log):
        print(f"Event log not found: {args.log}")
        return 1

    log = EventLog(args.log)
    try:
        games = log.replay()
    except ValueError as e:
        print(f"Could not replay {args.log}: {e}")
        return 1

    if not len(games):
        print("No games in event log")
        return 0
    for game in games:
        print(describe_game(game))
    return 0


def handle_info(args) -> int:
    print(f"connect4_events {__version__}")
    print(f"Board: {COLS} columns x {ROWS} rows, {CONNECT_N} in a row to win")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Connect Four rules engine',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py replay data/events.json
  python run.py replay data/events.json --debug_level debug
  python run.py info
    """
    )
    parser.add_argument('--debug',
        action='store_true',
        help='Enable debug mode (equivalent to --debug_level debug)')
    parser.add_argument('--debug_level',
        choices=[level.name.lower() for level in DebugLevel],
        help='Set debug level: none (silent), error, warning, info, debug, trace (most verbose)')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    replay_parser = subparsers.add_parser('replay',
        help='Replay an event log and summarise its games')
    replay_parser.add_argument('log', help='Path to a JSON event log')

    subparsers.add_parser('info', help='Show version and board geometry')

    args = parser.parse_args(argv)
    configure_debug(args)

    if args.command == 'replay':
        return handle_replay(args)
    elif args.command == 'info':
        return handle_info(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
