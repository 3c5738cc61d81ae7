"""UDP query protocol client used to list players on a remote game server.

Only the handshake and full-stat exchange are implemented, and only the
player section of the stat reply is read.
"""

import logging
import random
import re
import socket
import struct
from dataclasses import dataclass

from ..exceptions import QueryError

logger = logging.getLogger(__name__)

MAGIC = b"\xfe\xfd"
TYPE_HANDSHAKE = 0x09
TYPE_STAT = 0x00

HANDSHAKE_BUFFER_SIZE = 128
STAT_BUFFER_SIZE = 4096
STAT_HEADER_SIZE = 5  # type byte + session id
PLAYER_SECTION = "player_"

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_TOKEN_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class RemoteServer:
    """Address of the remote server to query."""

    host: str
    port: int


def build_handshake(session_id: int) -> bytes:
    """Build the handshake datagram for a session."""
    return MAGIC + struct.pack(">BI", TYPE_HANDSHAKE, session_id)


def build_stat_request(session_id: int, challenge_token: int) -> bytes:
    """Build a full-stat request datagram (4 trailing padding bytes)."""
    return MAGIC + struct.pack(">BIiI", TYPE_STAT, session_id, challenge_token, 0)


def parse_handshake(data: bytes, session_id: int) -> int:
    """
    Validate a handshake reply and return its challenge token.

    Args:
        data: Raw datagram received from the server.
        session_id: Session id sent in the handshake.

    Raises:
        QueryError: If the reply is malformed, belongs to another session or
            carries a token that is not a 32-bit integer.
    """
    if not data or data[0] != TYPE_HANDSHAKE:
        raise QueryError("Invalid handshake response")
    if len(data) < 5:
        raise QueryError("Incomplete handshake response")
    (response_session,) = struct.unpack_from(">I", data, 1)
    if response_session != session_id:
        raise QueryError("Session ID mismatch")

    raw_token = data[5:].split(b"\x00", 1)[0]
    challenge = raw_token.decode("latin-1").strip()
    if not _TOKEN_PATTERN.fullmatch(challenge):
        raise QueryError(f"Invalid challenge token: {challenge}")
    token = int(challenge)
    if not _INT32_MIN <= token <= _INT32_MAX:
        raise QueryError(f"Invalid challenge token: {challenge}")
    return token


def _sanitize(segment: str) -> str:
    """Strip leading section markers (0x00 / 0x01) from a segment."""
    return segment.lstrip("\x00\x01")


def extract_players(data: bytes) -> list[str]:
    """
    Extract player names from a full-stat reply.

    Names are the non-empty segments following the ``player_`` marker, up to
    the first empty segment. Order is preserved as sent by the server.
    """
    if len(data) <= STAT_HEADER_SIZE:
        return []

    segments = [
        _sanitize(raw.decode("utf-8", errors="replace"))
        for raw in data[STAT_HEADER_SIZE:].split(b"\x00")
    ]
    try:
        index = segments.index(PLAYER_SECTION) + 1
    except ValueError:
        return []

    while index < len(segments) and not segments[index]:
        index += 1

    players: list[str] = []
    for segment in segments[index:]:
        if not segment:
            break
        players.append(segment)
    return players


def query_players(host: str, port: int, timeout: float) -> list[str]:
    """
    Ask a remote server for its online players.

    Args:
        host: Hostname or address of the server.
        port: Query port.
        timeout: Seconds to wait for each reply.

    Returns:
        Player names sorted case-insensitively.

    Raises:
        QueryError: On any network or protocol failure.
    """
    try:
        family, _, _, _, address = socket.getaddrinfo(
            host, port, type=socket.SOCK_DGRAM
        )[0]
        with socket.socket(family, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)

            session_id = random.getrandbits(32)
            sock.sendto(build_handshake(session_id), address)
            reply, _ = sock.recvfrom(HANDSHAKE_BUFFER_SIZE)
            token = parse_handshake(reply, session_id)

            sock.sendto(build_stat_request(session_id, token), address)
            stat, _ = sock.recvfrom(STAT_BUFFER_SIZE)
    except socket.timeout:
        raise QueryError(f"Timed out querying {host}:{port}") from None
    except OSError as e:
        raise QueryError(f"Unable to query {host}:{port}: {e}") from e

    players = extract_players(stat)
    logger.debug("Query of %s:%d returned %d players", host, port, len(players))
    return sorted(players, key=str.casefold)
