"""Member scanner: extracts referenced class names from one class file."""

from __future__ import annotations

from typing import Set

from .classfile import ClassFormatError, ClassUnit, read_class
from .descriptors import (
    DescriptorError,
    internal_to_class_name,
    parse_field_type,
    parse_method_descriptor,
)
from .logging import get_logger
from .models import ScanPolicy, ScanResult


class MemberScanner:
    """Collects declared-type and code-level references according to a scan policy."""

    def __init__(self, policy: ScanPolicy | None = None) -> None:
        self.policy = policy or ScanPolicy()
        self.logger = get_logger("scanner")

    def scan(self, payload: bytes) -> ScanResult:
        """Return the classes referenced by ``payload``.

        A structural error stops the scan of this unit only: references found
        before the error are kept and the error message is reported.
        """
        references: Set[str] = set()
        try:
            unit = read_class(payload)
            self._collect(unit, references)
        except (ClassFormatError, DescriptorError) as exc:
            return ScanResult(references=frozenset(references), error=str(exc))
        return ScanResult(references=frozenset(references))

    def _collect(self, unit: ClassUnit, references: Set[str]) -> None:
        if self.policy.declarations:
            for field_info in unit.fields:
                name, _ = parse_field_type(field_info.descriptor)
                if name is not None:
                    references.add(name)

        for method in unit.methods:
            if self.policy.declarations:
                references.update(parse_method_descriptor(method.descriptor))
            if not self.policy.code:
                continue
            for ref in unit.iter_member_refs(method):
                if ref.owner.startswith("["):
                    continue
                owner = internal_to_class_name(ref.owner)
                self.logger.debug(
                    "%s %s.%s referenced from %s.%s",
                    "Field" if ref.is_field else "Method",
                    owner,
                    ref.name,
                    internal_to_class_name(unit.this_class),
                    method.name,
                )
                references.add(owner)


__all__ = ["MemberScanner"]
