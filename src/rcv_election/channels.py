"""
Boundary between the election and the chat platform that holds its ballots.

The election only needs a handful of operations from the platform: read the
recent records of a conversation, reply to a record, and add or remove marker
symbols on records. `Channel` defines those operations; `JsonFileChannel`
implements them over a JSON file so elections can be run offline.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Union

import abc
import json
import logging
import pathlib
from dataclasses import dataclass, field

from rcv_election.marks import RankMarks

logger = logging.getLogger(__name__)


@dataclass
class ChannelRecord:
    """One record (message) in a conversation, with the voters behind each marker on it."""
    record_id: str
    content: str
    markers: Dict[str, List[str]] = field(default_factory=dict)

    def has_mark(self, symbol: str) -> bool:
        return RankMarks.has_mark(self.markers, symbol)


def read_records_json(path: Union[str, pathlib.Path]) -> List[ChannelRecord]:
    """Read records from a JSON list of objects with "id", "content" and "markers", oldest first."""
    path = pathlib.Path(path)
    if not path.is_file():
        raise RuntimeError(f"not a valid file path: {path}")

    with open(path, encoding="utf8") as record_file:
        raw_records = json.load(record_file)

    if not isinstance(raw_records, list):
        raise RuntimeError(f"expected a list of records in {path}")

    return [
        ChannelRecord(
            record_id=str(raw.get("id", idx)),
            content=raw.get("content", ""),
            markers={symbol: list(voters) for symbol, voters in raw.get("markers", {}).items()},
        )
        for idx, raw in enumerate(raw_records)
    ]


@dataclass
class Member:
    """A principal whose roles can be checked."""
    member_id: str
    name: str
    roles: List[str] = field(default_factory=list)


@dataclass
class Command:
    """A text command received from the platform."""
    record_id: str
    content: str
    author_id: str
    member: Optional[Member] = None


class Channel(abc.ABC):
    """A conversation on the chat platform. All operations are awaited one at a time."""

    @property
    @abc.abstractmethod
    def channel_id(self) -> str:
        pass

    @property
    def is_direct(self) -> bool:
        """True for one-to-one conversations, where elections cannot be held."""
        return False

    @abc.abstractmethod
    async def fetch_records(self, limit: int) -> List[ChannelRecord]:
        """Return up to `limit` most recent records, newest first."""
        pass

    @abc.abstractmethod
    async def reply(self, record_id: str, text: str) -> None:
        pass

    @abc.abstractmethod
    async def add_marker(self, record_id: str, symbol: str) -> None:
        pass

    @abc.abstractmethod
    async def remove_marker(self, record_id: str, symbol: str) -> None:
        """Remove every instance of `symbol` from a record."""
        pass

    @abc.abstractmethod
    async def server_roles(self) -> Optional[List[str]]:
        """Names of the roles that exist where this channel lives, or None if roles do not apply."""
        pass


class JsonFileChannel(Channel):
    """
    Channel backed by a JSON file holding a list of records in chronological order::

        [
            {"id": "1", "content": "Election!", "markers": {"🔰": ["admin"]}},
            {"id": "2", "content": "Alice", "markers": {"1️⃣": ["v1"], "2️⃣": ["v2"]}}
        ]

    Markers added or removed through the channel are applied in memory and written
    back when `save` is called. Replies are kept in `replies`.
    """

    def __init__(
        self,
        path: Union[str, pathlib.Path],
        marker_author: str = "rcv-election",
        roles: Optional[List[str]] = None,
    ) -> None:
        self.path = pathlib.Path(path)
        self.marker_author = marker_author
        self.roles = roles
        self.replies: List[Dict[str, str]] = []

        self.records = read_records_json(self.path)

    @property
    def channel_id(self) -> str:
        return str(self.path)

    def _record(self, record_id: str) -> ChannelRecord:
        for record in self.records:
            if record.record_id == record_id:
                return record
        raise RuntimeError(f"no record with id {record_id} in {self.path}")

    async def fetch_records(self, limit: int) -> List[ChannelRecord]:
        return list(reversed(self.records))[:limit]

    async def reply(self, record_id: str, text: str) -> None:
        self.replies.append({"record_id": record_id, "text": text})

    async def add_marker(self, record_id: str, symbol: str) -> None:
        voters = self._record(record_id).markers.setdefault(symbol, [])
        if self.marker_author not in voters:
            voters.append(self.marker_author)

    async def remove_marker(self, record_id: str, symbol: str) -> None:
        record = self._record(record_id)
        for mark in [mark for mark in record.markers if RankMarks.same_mark(mark, symbol)]:
            del record.markers[mark]

    async def server_roles(self) -> Optional[List[str]]:
        return self.roles

    def save(self) -> None:
        raw_records = [
            {"id": record.record_id, "content": record.content, "markers": record.markers}
            for record in self.records
        ]
        with open(self.path, "w", encoding="utf8") as record_file:
            json.dump(raw_records, record_file, ensure_ascii=False, indent=2)
        logger.info(f"wrote markers back to {self.path}")
