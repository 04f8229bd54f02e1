from __future__ import annotations
from typing import Iterator, List

import logging

logger = logging.getLogger(__name__)


########################
# helper funcs


class AuditLog:
    """Append-only list of text lines explaining every tabulation decision."""

    def __init__(self) -> None:
        self.lines: List[str] = []

    def write(self, line: str) -> None:
        if "\n" in line:
            raise RuntimeError(f"AuditLog.write expects a single line, got {line!r}")
        self.lines.append(line)
        logger.debug(line)

    def extend(self, lines: List[str]) -> None:
        for line in lines:
            self.write(line)

    def text(self) -> str:
        return "\n".join(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


def plural(n: int, word: str, suffix: str = "s") -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}{suffix}"


def join_names(names: List[str]) -> str:
    return ", ".join(names)


def DL2LD(dl):
    return [dict(zip(dl, t)) for t in zip(*dl.values())]
