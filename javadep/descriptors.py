"""Decoding of JVM field and method descriptors into referenced class names."""

from __future__ import annotations

from typing import List, Optional, Tuple

from .logging import get_logger

PRIMITIVE_TAGS = frozenset("BCDFIJSZ")
_VOID_TAG = "V"

_LOGGER = get_logger("descriptors")


class DescriptorError(ValueError):
    """Raised when a descriptor string is structurally invalid."""


def internal_to_class_name(internal_name: str) -> str:
    """Convert a slash-separated internal name to a dotted class name."""
    return internal_name.replace("/", ".")


def parse_field_type(descriptor: str, offset: int = 0) -> Tuple[Optional[str], int]:
    """Parse one field type starting at ``offset``.

    Returns the referenced class name (``None`` for primitives and arrays of
    primitives) and the offset just past the consumed characters, so callers
    can walk a concatenated sequence of types.
    """
    return _parse_type(descriptor, offset, allow_void=False)


def parse_method_descriptor(descriptor: str) -> List[str]:
    """Return every class referenced by a method descriptor's parameters and return type."""
    if not descriptor.startswith("("):
        _LOGGER.error("Invalid method descriptor: %s", descriptor)
        return []

    references: List[str] = []
    pos = 1
    while True:
        if pos >= len(descriptor):
            raise DescriptorError(f"Unterminated parameter list in {descriptor!r}")
        if descriptor[pos] == ")":
            break
        name, pos = _parse_type(descriptor, pos, allow_void=False)
        if name is not None:
            references.append(name)

    name, pos = _parse_type(descriptor, pos + 1, allow_void=True)
    if name is not None:
        references.append(name)
    return references


def _parse_type(descriptor: str, offset: int, *, allow_void: bool) -> Tuple[Optional[str], int]:
    pos = offset
    length = len(descriptor)
    while pos < length and descriptor[pos] == "[":
        pos += 1
    if pos >= length:
        raise DescriptorError(f"Descriptor {descriptor!r} ends before a type tag at offset {offset}")

    tag = descriptor[pos]
    if tag in PRIMITIVE_TAGS:
        return None, pos + 1
    if tag == _VOID_TAG and allow_void and pos == offset:
        return None, pos + 1
    if tag != "L":
        raise DescriptorError(f"Unknown type tag {tag!r} in {descriptor!r} at offset {pos}")

    end = descriptor.find(";", pos + 1)
    if end < 0:
        raise DescriptorError(f"Unterminated class name in {descriptor!r} at offset {pos}")
    if end == pos + 1:
        raise DescriptorError(f"Empty class name in {descriptor!r} at offset {pos}")
    return internal_to_class_name(descriptor[pos + 1 : end]), end + 1


__all__ = [
    "DescriptorError",
    "PRIMITIVE_TAGS",
    "internal_to_class_name",
    "parse_field_type",
    "parse_method_descriptor",
]
