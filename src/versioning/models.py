"""Data models for versioning and peer resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Any, Dict, List, Optional, Tuple, Union

# Prerelease identifiers: numeric ones are stored as int, the rest as str.
Identifier = Union[int, str]


@total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    """Parsed semantic version.

    Equality, hashing and ordering follow precedence: build metadata is
    carried for rendering but never compared. Use ``identical`` when the
    build metadata must match as well.
    """
    major: int
    minor: int
    patch: int
    prerelease: Tuple[Identifier, ...] = ()
    build: Tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def release(self) -> Tuple[int, int, int]:
        """Return the (major, minor, patch) tuple."""
        return (self.major, self.minor, self.patch)

    def precedence_key(self) -> Tuple[Any, ...]:
        """Sort key implementing semantic-version precedence.

        Numeric identifiers sort before alphanumeric ones; a release sorts
        after every prerelease of the same major.minor.patch.
        """
        pre = tuple((0, i) if isinstance(i, int) else (1, i) for i in self.prerelease)
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, pre)

    def identical(self, other: "SemanticVersion") -> bool:
        """Exact comparison including build metadata."""
        return self == other and self.build == other.build

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence_key() == other.precedence_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence_key() < other.precedence_key()

    def __hash__(self) -> int:
        return hash(self.precedence_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(str(i) for i in self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


class Operator(Enum):
    """Comparison operators usable in a comparator."""
    EQ = "="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="


@dataclass(frozen=True)
class Comparator:
    """A single inequality against one version."""
    operator: Operator
    version: SemanticVersion

    def __str__(self) -> str:
        prefix = "" if self.operator is Operator.EQ else self.operator.value
        return f"{prefix}{self.version}"


@dataclass(frozen=True)
class ComparatorSet:
    """Comparators joined by AND."""
    comparators: Tuple[Comparator, ...]

    def __iter__(self):
        return iter(self.comparators)

    def __len__(self) -> int:
        return len(self.comparators)

    def __str__(self) -> str:
        return " ".join(str(c) for c in self.comparators)


@dataclass(frozen=True)
class Range:
    """Comparator sets joined by OR; the constraint stored per dependency edge."""
    sets: Tuple[ComparatorSet, ...]
    raw: str = field(default="", compare=False)

    def __iter__(self):
        return iter(self.sets)

    def __str__(self) -> str:
        return " || ".join(str(s) for s in self.sets)


class ResolutionStatus(Enum):
    """Outcome of resolving one peer name."""
    RESOLVED = "resolved"
    UNSATISFIABLE = "unsatisfiable"
    SKIPPED = "skipped"


class ResolutionCause(Enum):
    """Why a peer could not be resolved."""
    NO_MATCHING_CANDIDATE = "no_matching_candidate"
    CONFLICTING_CONSTRAINTS = "conflicting_constraints"
    CATALOG_UNAVAILABLE = "catalog_unavailable"


@dataclass(frozen=True)
class PeerRequirement:
    """One constraint contributed by a requester on a peer name."""
    requester: str
    range: Range
    optional: bool = False
    kind: str = "peer"  # "peer" | "dependency"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requester": self.requester,
            "range": self.range.raw or str(self.range),
            "optional": self.optional,
            "kind": self.kind,
        }


@dataclass
class ResolutionResult:
    """Resolution outcome for one peer, consumed by the reporting layer."""
    peer: str
    status: ResolutionStatus
    chosen_version: Optional[SemanticVersion] = None
    requirements: List[PeerRequirement] = field(default_factory=list)
    unmet_optional: List[PeerRequirement] = field(default_factory=list)
    cause: Optional[ResolutionCause] = None
    conflicts: List[Tuple[str, ...]] = field(default_factory=list)
    installed_version: Optional[SemanticVersion] = None
    candidate_count: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peer": self.peer,
            "status": self.status.value,
            "chosenVersion": str(self.chosen_version) if self.chosen_version else None,
            "requirements": [r.to_dict() for r in self.requirements],
            "unmetOptional": [r.to_dict() for r in self.unmet_optional],
            "cause": self.cause.value if self.cause else None,
            "conflicts": [list(pair) for pair in self.conflicts],
            "installedVersion": str(self.installed_version) if self.installed_version else None,
            "candidateCount": self.candidate_count,
            "error": self.error,
        }


class EngineStatus(Enum):
    """Outcome of checking one tool version against its requirement."""
    OK = "ok"
    UNSUPPORTED = "unsupported"
    INVALID = "invalid"


@dataclass(frozen=True)
class EngineCheckResult:
    """Engine check outcome; advisory unless the caller escalates it."""
    tool: Optional[str]
    status: EngineStatus
    current: Optional[str]
    required: Optional[str]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is EngineStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool": self.tool,
            "status": self.status.value,
            "current": self.current,
            "required": self.required,
            "error": self.error,
        }
