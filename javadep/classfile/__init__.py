"""Class file decoding used by the member scanner."""

from .reader import (
    ClassFormatError,
    ClassUnit,
    ConstantPool,
    MemberInfo,
    MemberRef,
    iter_member_refs,
    read_class,
)

__all__ = [
    "ClassFormatError",
    "ClassUnit",
    "ConstantPool",
    "MemberInfo",
    "MemberRef",
    "iter_member_refs",
    "read_class",
]
