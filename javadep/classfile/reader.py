"""Structural decoding of compiled class files.

Only the parts needed for dependency discovery are materialised: the
constant pool, field and method declarations, and the raw bytecode of each
method's ``Code`` attribute. Every other attribute (line numbers, local
variable tables, stack maps, annotations) is skipped by length.
"""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .constants import (
    CONSTANT_CLASS,
    CONSTANT_NAME_AND_TYPE,
    CONSTANT_SIZES,
    CONSTANT_UTF8,
    FIELD_INSNS,
    IINC,
    LOOKUPSWITCH,
    MAGIC,
    MEMBER_REF_TAGS,
    METHOD_INSNS,
    OPERAND_SIZES,
    TABLESWITCH,
    WIDE,
    WIDE_CONSTANTS,
)

_CODE_ATTRIBUTE = "Code"
_SURROGATE_PAIR = re.compile("[\ud800-\udbff][\udc00-\udfff]")


class ClassFormatError(ValueError):
    """Raised when a payload is not a well-formed class file."""


@dataclass
class MemberInfo:
    """A declared field or method."""

    access_flags: int
    name: str
    descriptor: str
    code: Optional[bytes] = None


@dataclass(frozen=True)
class MemberRef:
    """A field access or method invocation found in a method body."""

    opcode: int
    owner: str
    name: str
    descriptor: str

    @property
    def is_field(self) -> bool:
        return self.opcode in FIELD_INSNS


@dataclass
class ClassUnit:
    """Decoded view of one class file."""

    major_version: int
    minor_version: int
    access_flags: int
    this_class: str
    super_class: Optional[str]
    interfaces: List[str] = field(default_factory=list)
    fields: List[MemberInfo] = field(default_factory=list)
    methods: List[MemberInfo] = field(default_factory=list)
    pool: Optional[ConstantPool] = None

    def iter_member_refs(self, method: MemberInfo) -> Iterator[MemberRef]:
        """Yield the field and method references used by ``method``'s body."""
        if method.code is None or self.pool is None:
            return iter(())
        return iter_member_refs(method.code, self.pool)


class _ByteReader:
    def __init__(self, data: bytes, offset: int = 0) -> None:
        self.data = data
        self.pos = offset

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if size < 0 or end > len(self.data):
            raise ClassFormatError(
                f"Truncated class file: need {size} bytes at offset {self.pos}, have {len(self.data) - self.pos}"
            )
        chunk = self.data[self.pos : end]
        self.pos = end
        return chunk

    def u1(self) -> int:
        return self.take(1)[0]

    def u2(self) -> int:
        return struct.unpack(">H", self.take(2))[0]

    def u4(self) -> int:
        return struct.unpack(">I", self.take(4))[0]

    def s4(self) -> int:
        return struct.unpack(">i", self.take(4))[0]


class ConstantPool:
    """Indexed constant pool with the lookups needed for dependency discovery."""

    def __init__(self, entries: List[Optional[Tuple[int, object]]]) -> None:
        self._entries = entries

    def __len__(self) -> int:
        return len(self._entries)

    def _entry(self, index: int, expected: Optional[frozenset] = None) -> Tuple[int, object]:
        entry = self._entries[index] if 0 < index < len(self._entries) else None
        if entry is None:
            raise ClassFormatError(f"Invalid constant pool index {index}")
        if expected is not None and entry[0] not in expected:
            raise ClassFormatError(
                f"Constant pool entry {index} has tag {entry[0]}, expected one of {sorted(expected)}"
            )
        return entry

    def utf8(self, index: int) -> str:
        _, value = self._entry(index, frozenset({CONSTANT_UTF8}))
        return str(value)

    def class_name(self, index: int) -> str:
        """Internal (slash-separated) name of a ``CONSTANT_Class`` entry."""
        _, name_index = self._entry(index, frozenset({CONSTANT_CLASS}))
        return self.utf8(int(name_index))  # type: ignore[arg-type]

    def member_ref(self, index: int) -> Tuple[str, str, str]:
        """Return ``(owner, name, descriptor)`` of a field or method reference."""
        _, payload = self._entry(index, MEMBER_REF_TAGS)
        class_index, nat_index = payload  # type: ignore[misc]
        _, nat = self._entry(nat_index, frozenset({CONSTANT_NAME_AND_TYPE}))
        name_index, descriptor_index = nat  # type: ignore[misc]
        return self.class_name(class_index), self.utf8(name_index), self.utf8(descriptor_index)


def decode_modified_utf8(raw: bytes) -> str:
    """Decode the JVM's modified UTF-8 (two-byte NUL, surrogate pairs as separate sequences).

    Paired surrogates are joined into one character; unpaired ones, which
    Java string literals may legally hold, are kept as lone code points.
    """
    text = raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", errors="surrogatepass")
    return _SURROGATE_PAIR.sub(_join_surrogates, text)


def _join_surrogates(match: re.Match[str]) -> str:
    high, low = match.group(0)
    return chr(0x10000 + ((ord(high) - 0xD800) << 10) + (ord(low) - 0xDC00))


def read_class(payload: bytes) -> ClassUnit:
    """Decode ``payload`` into a :class:`ClassUnit`."""
    reader = _ByteReader(payload)
    if len(payload) < 4 or reader.u4() != MAGIC:
        raise ClassFormatError("Missing class file magic number")
    minor = reader.u2()
    major = reader.u2()
    pool = _read_constant_pool(reader)

    access_flags = reader.u2()
    this_class = pool.class_name(reader.u2())
    super_index = reader.u2()
    super_class = pool.class_name(super_index) if super_index else None
    interfaces = [pool.class_name(reader.u2()) for _ in range(reader.u2())]

    fields = _read_members(reader, pool)
    methods = _read_members(reader, pool)

    return ClassUnit(
        major_version=major,
        minor_version=minor,
        access_flags=access_flags,
        this_class=this_class,
        super_class=super_class,
        interfaces=interfaces,
        fields=fields,
        methods=methods,
        pool=pool,
    )


def _read_constant_pool(reader: _ByteReader) -> ConstantPool:
    count = reader.u2()
    entries: List[Optional[Tuple[int, object]]] = [None] * max(count, 1)
    index = 1
    while index < count:
        tag = reader.u1()
        if tag == CONSTANT_UTF8:
            length = reader.u2()
            try:
                entries[index] = (tag, decode_modified_utf8(reader.take(length)))
            except UnicodeDecodeError as exc:
                raise ClassFormatError(f"Malformed UTF-8 constant at index {index}: {exc}") from exc
        elif tag == CONSTANT_CLASS:
            entries[index] = (tag, reader.u2())
        elif tag in MEMBER_REF_TAGS or tag == CONSTANT_NAME_AND_TYPE:
            entries[index] = (tag, (reader.u2(), reader.u2()))
        elif tag in CONSTANT_SIZES:
            entries[index] = (tag, reader.take(CONSTANT_SIZES[tag]))
        else:
            raise ClassFormatError(f"Unknown constant pool tag {tag} at index {index}")
        index += 2 if tag in WIDE_CONSTANTS else 1
    return ConstantPool(entries)


def _read_members(reader: _ByteReader, pool: ConstantPool) -> List[MemberInfo]:
    members: List[MemberInfo] = []
    for _ in range(reader.u2()):
        access_flags = reader.u2()
        name = pool.utf8(reader.u2())
        descriptor = pool.utf8(reader.u2())
        code: Optional[bytes] = None
        for _ in range(reader.u2()):
            attribute_name = pool.utf8(reader.u2())
            body = reader.take(reader.u4())
            if attribute_name == _CODE_ATTRIBUTE:
                code = _extract_bytecode(body)
        members.append(MemberInfo(access_flags, name, descriptor, code))
    return members


def _extract_bytecode(attribute: bytes) -> bytes:
    reader = _ByteReader(attribute)
    reader.u2()  # max_stack
    reader.u2()  # max_locals
    return reader.take(reader.u4())


def iter_member_refs(code: bytes, pool: ConstantPool) -> Iterator[MemberRef]:
    """Walk ``code`` instruction by instruction, yielding field and method references."""
    reader = _ByteReader(code)
    while reader.pos < len(code):
        start = reader.pos
        opcode = reader.u1()
        if opcode in FIELD_INSNS or opcode in METHOD_INSNS:
            owner, name, descriptor = pool.member_ref(reader.u2())
            yield MemberRef(opcode, owner, name, descriptor)
            reader.take(OPERAND_SIZES[opcode] - 2)
        elif opcode == TABLESWITCH:
            reader.take((4 - (start + 1) % 4) % 4)
            reader.s4()  # default
            low = reader.s4()
            high = reader.s4()
            if high < low:
                raise ClassFormatError(f"Invalid tableswitch bounds at offset {start}")
            reader.take((high - low + 1) * 4)
        elif opcode == LOOKUPSWITCH:
            reader.take((4 - (start + 1) % 4) % 4)
            reader.s4()  # default
            pairs = reader.s4()
            if pairs < 0:
                raise ClassFormatError(f"Invalid lookupswitch size at offset {start}")
            reader.take(pairs * 8)
        elif opcode == WIDE:
            reader.take(4 if reader.u1() == IINC else 2)
        elif opcode in OPERAND_SIZES:
            reader.take(OPERAND_SIZES[opcode])
        else:
            raise ClassFormatError(f"Unknown opcode 0x{opcode:02x} at offset {start}")


__all__ = [
    "ClassFormatError",
    "ClassUnit",
    "ConstantPool",
    "MemberInfo",
    "MemberRef",
    "decode_modified_utf8",
    "iter_member_refs",
    "read_class",
]
