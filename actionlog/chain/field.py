"""
Prime-field scalars used for action values, hashes and commitments.
"""

from typing import Union


# Pallas base field modulus
MODULUS = 0x40000000000000000000000000000000224698fc094cf91b992d30ed00000001

FIELD_SIZE_IN_BYTES = 32


class Field:
    """
    An element of the prime field.

    Values are reduced on construction, so two Fields compare equal exactly
    when they denote the same residue.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[int, "Field"] = 0):
        if isinstance(value, Field):
            value = value._value
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Field expects an int, got {type(value).__name__}")
        self._value = value % MODULUS

    @classmethod
    def zero(cls) -> "Field":
        return cls(0)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Field":
        """Decode little-endian bytes, reducing into the field."""
        return cls(int.from_bytes(data, "little"))

    def to_bytes(self) -> bytes:
        return self._value.to_bytes(FIELD_SIZE_IN_BYTES, "little")

    def is_zero(self) -> bool:
        return self._value == 0

    def __add__(self, other: Union[int, "Field"]) -> "Field":
        return Field(self._value + Field(other)._value)

    __radd__ = __add__

    def __eq__(self, other) -> bool:
        if isinstance(other, Field):
            return self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other % MODULUS
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"Field({self._value})"

    def short(self) -> str:
        """Abbreviated hex for log lines."""
        text = f"{self._value:x}"
        if len(text) <= 12:
            return "0x" + text
        return f"0x{text[:6]}..{text[-4:]}"


FieldLike = Union[int, Field]


def to_field(value: FieldLike) -> Field:
    return value if isinstance(value, Field) else Field(value)
