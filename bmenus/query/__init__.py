"""Remote player list resolution."""

from .player_list import PlayerListCache, QueryState
from .protocol import RemoteServer, extract_players, query_players

__all__ = [
    "PlayerListCache",
    "QueryState",
    "RemoteServer",
    "extract_players",
    "query_players",
]
