"""Core data models shared across javadep components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional


@dataclass(frozen=True)
class ScanPolicy:
    """Run-wide switches controlling which references are followed."""

    declarations: bool = True
    code: bool = True
    system: bool = False

    def signature(self) -> str:
        """Stable identity used to key cached scan results."""
        return f"decl={int(self.declarations)};code={int(self.code)}"


class ClassState(str, Enum):
    """Lifecycle of a class name inside one traversal."""

    PENDING = "pending"
    RESOLVED = "resolved"
    VISITED = "visited"
    UNRESOLVED = "unresolved"
    SYSTEM = "system"


@dataclass
class ClassResource:
    """A located class file together with the archive that supplied it."""

    class_name: str
    resource: str
    payload: bytes
    archive: Optional[str]
    system: bool
    location: str = ""
    fingerprint: Optional[str] = None


@dataclass
class ScanResult:
    """References discovered in one class file."""

    references: FrozenSet[str] = frozenset()
    error: Optional[str] = None


@dataclass
class TraversalResult:
    """Outcome of a dependency traversal."""

    classes: FrozenSet[str]
    archives: FrozenSet[str]
    unresolved: FrozenSet[str] = frozenset()
    failed: FrozenSet[str] = frozenset()
    origins: Dict[str, Optional[str]] = field(default_factory=dict)
    states: Dict[str, ClassState] = field(default_factory=dict)
