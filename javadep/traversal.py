"""Worklist traversal computing the closure of class dependencies."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Deque, Dict, Iterable, Optional, Sequence, Set

from .classpath import ClassResolver, RuntimeImage
from .logging import get_logger
from .models import ClassResource, ClassState, ScanPolicy, ScanResult, TraversalResult
from .scanner import MemberScanner
from .stores import ScanCache, cache_key


class DependencyTraversal:
    """Resolves and scans every class reachable from a set of seeds, each exactly once.

    All traversal state (seen names, worklist, collected archives) belongs to
    the instance and is reset at the start of each :meth:`run`.
    """

    def __init__(
        self,
        resolver: ClassResolver,
        policy: ScanPolicy | None = None,
        *,
        scanner: MemberScanner | None = None,
        cache: ScanCache | None = None,
    ) -> None:
        self.resolver = resolver
        self.policy = policy or ScanPolicy()
        self.scanner = scanner or MemberScanner(self.policy)
        self.cache = cache
        self.logger = get_logger("traversal")
        self._reset()

    def _reset(self) -> None:
        self._queue: Deque[str] = deque()
        self._seen: Set[str] = set()
        self._states: Dict[str, ClassState] = {}
        self._origins: Dict[str, Optional[str]] = {}
        self._archives: Set[str] = set()
        self._unresolved: Set[str] = set()
        self._failed: Set[str] = set()

    def run(self, seeds: Iterable[str]) -> TraversalResult:
        """Traverse from ``seeds`` until no pending class remains."""
        self._reset()
        for seed in seeds:
            self._enqueue(seed)
        while self._queue:
            self._visit(self._queue.popleft())
        return TraversalResult(
            classes=frozenset(self._seen),
            archives=frozenset(self._archives),
            unresolved=frozenset(self._unresolved),
            failed=frozenset(self._failed),
            origins=dict(self._origins),
            states=dict(self._states),
        )

    def _enqueue(self, class_name: str) -> bool:
        if not class_name or class_name.startswith("[") or class_name in self._seen:
            return False
        self.logger.debug("Dependency found: %s", class_name)
        self._seen.add(class_name)
        self._states[class_name] = ClassState.PENDING
        self._queue.append(class_name)
        return True

    def _visit(self, class_name: str) -> None:
        resource = self.resolver.resolve(class_name, load=False)
        if resource is None:
            self.logger.warning("Class not found: %s", class_name)
            self._states[class_name] = ClassState.UNRESOLVED
            self._unresolved.add(class_name)
            return

        self._states[class_name] = ClassState.RESOLVED
        self._origins[class_name] = resource.archive
        if resource.archive is None:
            self.logger.debug("Runtime class, not followed: %s", class_name)
            self._states[class_name] = ClassState.SYSTEM
            return
        if resource.system and not self.policy.system:
            self.logger.debug("Jar not in classpath: %s", resource.archive)
            self._states[class_name] = ClassState.SYSTEM
            return

        self._archives.add(resource.archive)
        result = self._scan(resource)
        if result.error is not None:
            self.logger.error("Cannot scan class %s: %s", class_name, result.error)
            self._failed.add(class_name)
        for reference in sorted(result.references):
            self._enqueue(reference)
        self._states[class_name] = ClassState.VISITED

    def _scan(self, resource: ClassResource) -> ScanResult:
        key = cache_key(resource.location, resource.resource)
        # Cached references depend on the policy the scanner actually applies.
        signature = self.scanner.policy.signature()
        if self.cache is not None and resource.fingerprint:
            cached = self.cache.get(key, signature=signature, fingerprint=resource.fingerprint)
            if cached is not None:
                self.logger.debug("Using cached scan for %s", resource.class_name)
                return cached

        result = self.scanner.scan(self.resolver.load(resource))
        if self.cache is not None and resource.fingerprint:
            self.cache.store(key, signature=signature, fingerprint=resource.fingerprint, result=result)
        return result


def analyze(
    seeds: Sequence[str],
    classpath: Sequence[Path],
    *,
    system_path: Sequence[Path] = (),
    java_home: Path | None = None,
    policy: ScanPolicy | None = None,
    cache_path: Path | None = None,
) -> TraversalResult:
    """Build a resolver for ``classpath``, run one traversal and release every archive."""
    runtime = RuntimeImage.from_java_home(java_home) if java_home is not None else None
    cache = ScanCache(cache_path) if cache_path is not None else None
    with ClassResolver(classpath, system_path=system_path, runtime=runtime) as resolver:
        result = DependencyTraversal(resolver, policy, cache=cache).run(seeds)
    if cache is not None:
        cache.persist()
    return result


__all__ = ["DependencyTraversal", "analyze"]
