"""Registry of supported column types.

Single source of truth for the canonical column types: which of them are
integer-like, which length/precision values they accept, and how they map
to and from the physical type names reported by database introspection.

Usage:
    from db_table_builder.schema.types import registry

    registry.is_integer("bigInteger")          # True
    registry.validate_length("string", "191")  # ok
    registry.validate_length("string", "0")    # raises TypeConstraintError
    registry.to_physical("dateTime")           # 'datetime'
"""

import re
from dataclasses import dataclass
from enum import Enum

from db_table_builder.errors import ReasonCode, TypeConstraintError

_SINGLE_LENGTH = re.compile(r"^([0-9]+)$")
_PRECISION_SCALE = re.compile(r"^([0-9]+)\s*,\s*([0-9]+)$")

# Spellings of boolean literals across backends (PostgreSQL reports
# ``true``, SQLite and MySQL keep the ``1`` they were created with).
_BOOLEAN_LITERALS = {
    "1": "1",
    "true": "1",
    "t": "1",
    "0": "0",
    "false": "0",
    "f": "0",
}


class LengthDomain(str, Enum):
    """Shape of the length parameter a type accepts."""

    NONE = "none"
    SINGLE = "single"
    PRECISION_SCALE = "precision_scale"


@dataclass(frozen=True)
class ColumnType:
    """Static description of one canonical column type.

    For ``SINGLE`` domains ``min_length``/``max_length`` bound the value.
    For ``PRECISION_SCALE`` domains ``max_length`` bounds the precision and
    ``max_scale`` bounds the scale.
    """

    name: str
    physical: str
    integer: bool = False
    domain: LengthDomain = LengthDomain.NONE
    min_length: int = 0
    max_length: int = 0
    max_scale: int = 0
    default_length: str | None = None

    def describe_domain(self) -> str:
        if self.domain is LengthDomain.SINGLE:
            return f"integer {self.min_length}-{self.max_length}"
        if self.domain is LengthDomain.PRECISION_SCALE:
            return (
                f"precision 1-{self.max_length}, scale 0-{self.max_scale}, "
                "scale not greater than precision"
            )
        return "no length"


# Canonical column types, in the order they are offered to users.
COLUMN_TYPES: tuple[ColumnType, ...] = (
    ColumnType("integer", "integer", integer=True),
    ColumnType("smallInteger", "smallint", integer=True),
    ColumnType("bigInteger", "bigint", integer=True),
    ColumnType("date", "date"),
    ColumnType("time", "time"),
    ColumnType("dateTime", "datetime"),
    ColumnType("timestamp", "timestamp"),
    ColumnType(
        "string",
        "string",
        domain=LengthDomain.SINGLE,
        min_length=1,
        max_length=65535,
        default_length="255",
    ),
    ColumnType("text", "text"),
    ColumnType("binary", "binary"),
    ColumnType("boolean", "boolean"),
    ColumnType(
        "decimal",
        "decimal",
        domain=LengthDomain.PRECISION_SCALE,
        max_length=65,
        max_scale=30,
        default_length="8,2",
    ),
    ColumnType("double", "float"),
)


class ColumnTypeRegistry:
    """Lookup and validation over a fixed set of column types."""

    def __init__(self, column_types: tuple[ColumnType, ...] = COLUMN_TYPES):
        self._types: dict[str, ColumnType] = {t.name: t for t in column_types}
        self._by_physical: dict[str, ColumnType] = {t.physical: t for t in column_types}

    def names(self) -> list[str]:
        return list(self._types)

    def is_known(self, type_name: str) -> bool:
        return type_name in self._types

    def get(self, type_name: str) -> ColumnType:
        """Return the type description.

        Raises:
            TypeConstraintError: If the type is not registered.
        """
        try:
            return self._types[type_name]
        except KeyError:
            raise TypeConstraintError(
                ReasonCode.UNKNOWN_TYPE, column="", type=type_name
            ) from None

    def is_integer(self, type_name: str) -> bool:
        column_type = self._types.get(type_name)
        return column_type is not None and column_type.integer

    def integer_types(self) -> list[str]:
        return [t.name for t in self._types.values() if t.integer]

    def validate_length(self, type_name: str, length: str | None) -> None:
        """Check that ``length`` is legal for ``type_name``.

        ``None`` (or an empty string) means no length was supplied, which is
        legal for every type: types with a length domain fall back to their
        default length.

        Raises:
            TypeConstraintError: If the type is unknown, the type forbids a
                length, the value is malformed, or it is out of range.
        """
        column_type = self.get(type_name)
        value = _clean(length)
        if value is None:
            return

        context = {"type": type_name, "length": value, "domain": column_type.describe_domain()}

        if column_type.domain is LengthDomain.NONE:
            raise TypeConstraintError(ReasonCode.LENGTH_NOT_ALLOWED, **context)

        if column_type.domain is LengthDomain.SINGLE:
            match = _SINGLE_LENGTH.match(value)
            if not match:
                raise TypeConstraintError(ReasonCode.INVALID_LENGTH, **context)
            size = int(match.group(1))
            if not column_type.min_length <= size <= column_type.max_length:
                raise TypeConstraintError(ReasonCode.LENGTH_OUT_OF_RANGE, **context)
            return

        match = _PRECISION_SCALE.match(value)
        if not match:
            raise TypeConstraintError(ReasonCode.INVALID_LENGTH, **context)
        precision, scale = int(match.group(1)), int(match.group(2))
        if not (
            1 <= precision <= column_type.max_length
            and scale <= column_type.max_scale
            and scale <= precision
        ):
            raise TypeConstraintError(ReasonCode.LENGTH_OUT_OF_RANGE, **context)

    def normalize_length(self, type_name: str, length: str | None) -> str | None:
        """Validate ``length`` and return its canonical text.

        Fills in the type's default length when none is given, and removes
        whitespace around the precision/scale separator.
        """
        self.validate_length(type_name, length)
        column_type = self._types[type_name]
        value = _clean(length)
        if value is None:
            return column_type.default_length
        if column_type.domain is LengthDomain.PRECISION_SCALE:
            precision, scale = _PRECISION_SCALE.match(value).groups()
            return f"{int(precision)},{int(scale)}"
        return str(int(value))

    def normalize_default(self, type_name: str, default: str | None) -> str | None:
        """Return the canonical text of a default value.

        Boolean defaults are stored as ``"1"`` or ``"0"`` whichever way the
        database spells them.  Other defaults are returned unchanged.
        """
        if default is None or type_name != "boolean":
            return default
        return _BOOLEAN_LITERALS.get(default.strip().lower(), default)

    def to_physical(self, type_name: str) -> str:
        return self.get(type_name).physical

    def from_physical(self, physical_type: str) -> str:
        """Map a physical type name back to its canonical type.

        Raises:
            TypeConstraintError: If no canonical type maps to it.
        """
        column_type = self._by_physical.get(physical_type.lower())
        if column_type is None:
            raise TypeConstraintError(ReasonCode.UNSUPPORTED_PHYSICAL_TYPE, type=physical_type)
        return column_type.name

    def length_from_physical(
        self,
        type_name: str,
        length: int | None = None,
        precision: int | None = None,
        scale: int | None = None,
    ) -> str | None:
        """Translate physical length/precision/scale into canonical length text."""
        column_type = self.get(type_name)
        if column_type.domain is LengthDomain.SINGLE and length is not None:
            return str(length)
        if column_type.domain is LengthDomain.PRECISION_SCALE and precision is not None:
            return f"{precision},{scale or 0}"
        if column_type.domain is LengthDomain.NONE:
            return None
        return column_type.default_length

    def length_to_physical(
        self, type_name: str, length: str | None
    ) -> tuple[int | None, int | None, int | None]:
        """Split canonical length text into ``(length, precision, scale)``."""
        column_type = self.get(type_name)
        value = self.normalize_length(type_name, length)
        if value is None:
            return None, None, None
        if column_type.domain is LengthDomain.PRECISION_SCALE:
            precision, scale = value.split(",")
            return None, int(precision), int(scale)
        return int(value), None, None


def _clean(length: str | None) -> str | None:
    if length is None:
        return None
    value = str(length).strip()
    return value or None


registry = ColumnTypeRegistry()
