"""
events.py - Players, commands and events for Connect Four

Commands are the intents a caller proposes; they are never stored. Events are
the facts produced from accepted commands and are the only thing persisted or
replayed. Events serialise to tagged dictionaries that json can dump directly.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Union

from connect4_events.utils import Token


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Player:
    """A named participant and the token they play with in one game."""
    name: str
    token: Token

    def is_same_player(self, other: 'Player') -> bool:
        """Players are the same person when their names match, whatever the token."""
        return self.name == other.name

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "token": self.token.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        try:
            return cls(name=str(data["name"]), token=Token[data["token"]])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed player: {data!r}") from exc


# --- Commands ---

@dataclass(frozen=True)
class CreateGame:
    player1: Player
    player2: Player


@dataclass(frozen=True)
class PlaceToken:
    game: int
    player: Player
    column: int


Command = Union[CreateGame, PlaceToken]


# --- Events ---

@dataclass(frozen=True)
class GameCreated:
    id: int
    player1: Player
    player2: Player
    created: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class TokenPlaced:
    game: int
    token: Token
    column: int
    created: datetime = field(default_factory=utc_now)


GameEvent = Union[GameCreated, TokenPlaced]


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def event_to_dict(event: GameEvent) -> Dict[str, Any]:
    """
    Serialise an event to a tagged dictionary.

    Args:
        event: GameCreated or TokenPlaced

    Returns:
        Dictionary with a "type" tag, the event fields and an ISO-8601 UTC
        "created" timestamp
    """
    if isinstance(event, GameCreated):
        return {
            "type": "GameCreated",
            "id": event.id,
            "player1": event.player1.to_dict(),
            "player2": event.player2.to_dict(),
            "created": _format_timestamp(event.created),
        }
    if isinstance(event, TokenPlaced):
        return {
            "type": "TokenPlaced",
            "game": event.game,
            "token": event.token.name,
            "column": event.column,
            "created": _format_timestamp(event.created),
        }
    raise ValueError(f"Unknown event type {type(event).__name__}")


def event_from_dict(data: Dict[str, Any]) -> GameEvent:
    """
    Rebuild an event from the output of event_to_dict.

    Raises:
        ValueError: If the tag is unknown or a field is missing or malformed
    """
    kind = data.get("type") if isinstance(data, dict) else None
    try:
        if kind == "GameCreated":
            return GameCreated(
                id=int(data["id"]),
                player1=Player.from_dict(data["player1"]),
                player2=Player.from_dict(data["player2"]),
                created=_parse_timestamp(data["created"]),
            )
        if kind == "TokenPlaced":
            return TokenPlaced(
                game=int(data["game"]),
                token=Token[data["token"]],
                column=int(data["column"]),
                created=_parse_timestamp(data["created"]),
            )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed {kind} event: {data!r}") from exc
    raise ValueError(f"Unknown event kind {kind!r}")
