"""Constant-pool tags and opcode tables for the class file format."""

from __future__ import annotations

from typing import Dict

MAGIC = 0xCAFEBABE

CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
CONSTANT_FIELDREF = 9
CONSTANT_METHODREF = 10
CONSTANT_INTERFACE_METHODREF = 11
CONSTANT_NAME_AND_TYPE = 12
CONSTANT_METHOD_HANDLE = 15
CONSTANT_METHOD_TYPE = 16
CONSTANT_DYNAMIC = 17
CONSTANT_INVOKE_DYNAMIC = 18
CONSTANT_MODULE = 19
CONSTANT_PACKAGE = 20

# Payload size in bytes for every fixed-width constant-pool entry.
CONSTANT_SIZES: Dict[int, int] = {
    CONSTANT_INTEGER: 4,
    CONSTANT_FLOAT: 4,
    CONSTANT_LONG: 8,
    CONSTANT_DOUBLE: 8,
    CONSTANT_CLASS: 2,
    CONSTANT_STRING: 2,
    CONSTANT_FIELDREF: 4,
    CONSTANT_METHODREF: 4,
    CONSTANT_INTERFACE_METHODREF: 4,
    CONSTANT_NAME_AND_TYPE: 4,
    CONSTANT_METHOD_HANDLE: 3,
    CONSTANT_METHOD_TYPE: 2,
    CONSTANT_DYNAMIC: 4,
    CONSTANT_INVOKE_DYNAMIC: 4,
    CONSTANT_MODULE: 2,
    CONSTANT_PACKAGE: 2,
}

# Long and double entries occupy two pool slots.
WIDE_CONSTANTS = frozenset({CONSTANT_LONG, CONSTANT_DOUBLE})

MEMBER_REF_TAGS = frozenset(
    {CONSTANT_FIELDREF, CONSTANT_METHODREF, CONSTANT_INTERFACE_METHODREF}
)

GETSTATIC = 0xB2
PUTSTATIC = 0xB3
GETFIELD = 0xB4
PUTFIELD = 0xB5
INVOKEVIRTUAL = 0xB6
INVOKESPECIAL = 0xB7
INVOKESTATIC = 0xB8
INVOKEINTERFACE = 0xB9
INVOKEDYNAMIC = 0xBA
TABLESWITCH = 0xAA
LOOKUPSWITCH = 0xAB
WIDE = 0xC4
IINC = 0x84

FIELD_INSNS = frozenset({GETSTATIC, PUTSTATIC, GETFIELD, PUTFIELD})
METHOD_INSNS = frozenset({INVOKEVIRTUAL, INVOKESPECIAL, INVOKESTATIC, INVOKEINTERFACE})


def _operand_sizes() -> Dict[int, int]:
    sizes: Dict[int, int] = {}
    for opcode in range(0x00, 0x10):  # nop, constants
        sizes[opcode] = 0
    sizes[0x10] = 1  # bipush
    sizes[0x11] = 2  # sipush
    sizes[0x12] = 1  # ldc
    sizes[0x13] = 2  # ldc_w
    sizes[0x14] = 2  # ldc2_w
    for opcode in range(0x15, 0x1A):  # iload .. aload
        sizes[opcode] = 1
    for opcode in range(0x1A, 0x36):  # *load_<n>, array loads
        sizes[opcode] = 0
    for opcode in range(0x36, 0x3B):  # istore .. astore
        sizes[opcode] = 1
    for opcode in range(0x3B, 0x84):  # *store_<n>, array stores, stack, arithmetic
        sizes[opcode] = 0
    sizes[IINC] = 2
    for opcode in range(0x85, 0x99):  # conversions, comparisons
        sizes[opcode] = 0
    for opcode in range(0x99, 0xA9):  # if*, goto, jsr
        sizes[opcode] = 2
    sizes[0xA9] = 1  # ret
    for opcode in range(0xAC, 0xB2):  # returns
        sizes[opcode] = 0
    for opcode in range(GETSTATIC, INVOKEINTERFACE):
        sizes[opcode] = 2
    sizes[INVOKEINTERFACE] = 4
    sizes[INVOKEDYNAMIC] = 4
    sizes[0xBB] = 2  # new
    sizes[0xBC] = 1  # newarray
    sizes[0xBD] = 2  # anewarray
    sizes[0xBE] = 0  # arraylength
    sizes[0xBF] = 0  # athrow
    sizes[0xC0] = 2  # checkcast
    sizes[0xC1] = 2  # instanceof
    sizes[0xC2] = 0  # monitorenter
    sizes[0xC3] = 0  # monitorexit
    sizes[0xC5] = 3  # multianewarray
    sizes[0xC6] = 2  # ifnull
    sizes[0xC7] = 2  # ifnonnull
    sizes[0xC8] = 4  # goto_w
    sizes[0xC9] = 4  # jsr_w
    return sizes


# Fixed operand widths; tableswitch, lookupswitch and wide are decoded separately.
OPERAND_SIZES: Dict[int, int] = _operand_sizes()
