"""Package and package source model.

A package either comes from a configured repository or was handed to us
directly (a file on the command line). The two cases consult different
policy flags, so the source is a small tagged value rather than a class
hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

COMMANDLINE_SOURCE_ID = "@commandline"


class SourceKind(Enum):
    """Where a package came from."""

    COMMANDLINE = "commandline"
    REPOSITORY = "repository"


@dataclass(frozen=True)
class PackageSource:
    """Origin of a package.

    Attributes:
        kind: Command line or repository.
        id: Repository id, or ``@commandline`` for ad-hoc packages.
    """

    kind: SourceKind
    id: str = COMMANDLINE_SOURCE_ID

    @property
    def is_commandline(self) -> bool:
        return self.kind is SourceKind.COMMANDLINE


@dataclass(frozen=True)
class Package:
    """A package file awaiting signature verification.

    Attributes:
        path: Local path of the package file.
        source: Where the package came from.
    """

    path: str
    source: PackageSource

    @classmethod
    def from_commandline(cls, path: str) -> Package:
        return cls(path, PackageSource(SourceKind.COMMANDLINE))

    @classmethod
    def from_repository(cls, path: str, repo_id: str) -> Package:
        return cls(path, PackageSource(SourceKind.REPOSITORY, repo_id))
