"""
Exceptions raised while collecting ballots or tabulating an election.

Every error here is fatal to the operation in progress. The text of the error
is what gets reported back to whoever asked for the operation.
"""

from __future__ import annotations


class ElectionError(RuntimeError):
    """Base class for all election errors."""


class MalformedCandidateName(ElectionError):
    """Raised when a candidate record has no word characters to use as a name."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f'Record has no parsable candidate name: "{text}"')


class InvalidBallot(ElectionError):
    """Raised when a voter's rank markers cannot form a valid ranking."""


class DuplicateVoteError(InvalidBallot):
    """Raised when a voter gives the same rank to two candidates, or two ranks to one candidate."""

    def __init__(self, voter: str, rank: int, candidate_names: list) -> None:
        self.voter = voter
        self.rank = rank
        self.candidate_names = list(candidate_names)
        super().__init__(
            f'Voter "{voter}" ranked more than one candidate the same '
            f"(rank {rank + 1}: {', '.join(self.candidate_names)})"
        )


class ConflictingRankError(InvalidBallot):
    """Raised when a voter applies more than one rank marker to a single candidate."""

    def __init__(self, voter: str, candidate_name: str, ranks: list) -> None:
        self.voter = voter
        self.candidate_name = candidate_name
        self.ranks = sorted(ranks)
        super().__init__(
            f'Voter "{voter}" gave candidate "{candidate_name}" more than one rank '
            f"({', '.join(str(r + 1) for r in self.ranks)})"
        )


class NoStartMarkerFound(ElectionError):
    def __init__(self, max_records: int) -> None:
        self.max_records = max_records
        super().__init__(f'Could not find election start record in "{max_records}" records.')


class NoCandidatesFound(ElectionError):
    def __init__(self, max_records: int = None) -> None:
        self.max_records = max_records
        if max_records is None:
            super().__init__("Could not find any candidates.")
        else:
            super().__init__(f'Could not find any candidates in "{max_records}" records.')


class AlreadyFinished(ElectionError):
    def __init__(self) -> None:
        super().__init__("This election has already been tabulated. Reset it before tabulating again.")


class PermissionDenied(ElectionError):
    def __init__(self, role_name: str) -> None:
        self.role_name = role_name
        super().__init__(f'You need the "{role_name}" role to do that.')


class NoMember(ElectionError):
    def __init__(self) -> None:
        super().__init__("Could not resolve the member who sent this command.")


class UnsupportedChannel(ElectionError):
    def __init__(self) -> None:
        super().__init__("Elections cannot be held in direct messages.")


class DuplicateCandidateName(ElectionError):
    """Raised when two candidate records trim to the same name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'More than one candidate is named "{name}".')
