"""Error taxonomy for table validation, building and migration generation.

Every failure raised by this package derives from ``TableBuilderError``.
Validation failures carry structured reason codes and context rather than
pre-rendered text, so callers can localize messages on their own;
``ValidationIssue.message`` renders a default English message.

Usage:
    from db_table_builder.errors import ValidationError, ReasonCode

    try:
        model.validate(columns)
    except ValidationError as e:
        for issue in e.issues["columns"]:
            print(issue.code, issue.message)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ReasonCode(str, Enum):
    """Stable reason codes attached to validation issues."""

    REQUIRED = "required"
    INVALID_NAME = "invalid_name"
    INVALID_PREFIX = "invalid_prefix"
    INVALID_COLUMN_NAME = "invalid_column_name"
    MALFORMED_COLUMN = "malformed_column"
    UNKNOWN_TYPE = "unknown_type"
    DUPLICATE_COLUMN = "duplicate_column"
    MULTIPLE_PRIMARY_KEYS = "multiple_primary_keys"
    MULTIPLE_AUTO_INCREMENT = "multiple_auto_increment"
    AUTO_INCREMENT_NON_INTEGER = "auto_increment_non_integer"
    UNSIGNED_NON_INTEGER = "unsigned_non_integer"
    ILLEGAL_LENGTH = "illegal_length"
    INVALID_LENGTH = "invalid_length"
    LENGTH_NOT_ALLOWED = "length_not_allowed"
    LENGTH_OUT_OF_RANGE = "length_out_of_range"
    UNSUPPORTED_PHYSICAL_TYPE = "unsupported_physical_type"
    TABLE_RENAME = "table_rename"


MESSAGES: dict[ReasonCode, str] = {
    ReasonCode.REQUIRED: "The table name is required.",
    ReasonCode.INVALID_NAME: (
        "The table name can contain only lowercase Latin letters, digits and "
        "underscores, and must start with a letter."
    ),
    ReasonCode.INVALID_PREFIX: "The table name should start with '{prefix}'.",
    ReasonCode.INVALID_COLUMN_NAME: "Invalid column name '{column}'.",
    ReasonCode.MALFORMED_COLUMN: "Column #{index} is malformed: {detail}",
    ReasonCode.UNKNOWN_TYPE: "Column '{column}' has an unknown type '{type}'.",
    ReasonCode.DUPLICATE_COLUMN: "Duplicate column name: '{column}'.",
    ReasonCode.MULTIPLE_PRIMARY_KEYS: "A table can have only one primary key column.",
    ReasonCode.MULTIPLE_AUTO_INCREMENT: "A table can have only one auto-increment column.",
    ReasonCode.AUTO_INCREMENT_NON_INTEGER: (
        "Auto-increment column '{column}' must be of an integer type."
    ),
    ReasonCode.UNSIGNED_NON_INTEGER: "Unsigned column '{column}' must be of an integer type.",
    ReasonCode.ILLEGAL_LENGTH: "Invalid length for column '{column}': {detail}",
    ReasonCode.INVALID_LENGTH: "Invalid length '{length}' for the {type} type.",
    ReasonCode.LENGTH_NOT_ALLOWED: "The {type} type does not accept a length.",
    ReasonCode.LENGTH_OUT_OF_RANGE: (
        "Length '{length}' for the {type} type is out of range ({domain})."
    ),
    ReasonCode.UNSUPPORTED_PHYSICAL_TYPE: "Unsupported database column type '{type}'.",
    ReasonCode.TABLE_RENAME: "Renaming table '{existing}' to '{name}' is not supported.",
}


def render_message(code: ReasonCode, context: dict[str, Any]) -> str:
    """Render the default English message for a reason code."""
    try:
        return MESSAGES[code].format(**context)
    except KeyError:
        return code.value


class TableBuilderError(Exception):
    """Base class for all db-table-builder errors."""

    pass


class ConfigurationError(TableBuilderError):
    """Raised when required context is missing before an operation starts."""

    pass


class NotFoundError(TableBuilderError):
    """Raised when a referenced table does not exist."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"The table with name {table} doesn't exist")


class TypeConstraintError(TableBuilderError):
    """Raised when a column length is outside the legal domain of its type."""

    def __init__(self, code: ReasonCode, **context: Any):
        self.code = code
        self.context = context
        super().__init__(render_message(code, context))


@dataclass(frozen=True)
class ValidationIssue:
    """One rule violation, tagged with a reason code."""

    code: ReasonCode
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = field(default=None, compare=False, repr=False)

    @property
    def message(self) -> str:
        return render_message(self.code, self.context)


class ValidationError(TableBuilderError):
    """One or more rule violations in a proposed table definition.

    Attributes:
        issues: Mapping of field name (``name`` or ``columns``) to the
            issues reported for it, in rule order.
    """

    def __init__(self, issues: dict[str, list[ValidationIssue]]):
        self.issues = issues
        super().__init__(self._summary())

    @classmethod
    def single(cls, field_name: str, code: ReasonCode, **context: Any) -> "ValidationError":
        return cls({field_name: [ValidationIssue(code, context)]})

    @property
    def codes(self) -> dict[str, list[ReasonCode]]:
        return {name: [issue.code for issue in found] for name, found in self.issues.items()}

    def messages(self) -> dict[str, list[str]]:
        """Field name to rendered English messages."""
        return {name: [issue.message for issue in found] for name, found in self.issues.items()}

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Serializable form for UI layers (code, message and context per issue)."""
        return {
            name: [
                {"code": issue.code.value, "message": issue.message, "context": issue.context}
                for issue in found
            ]
            for name, found in self.issues.items()
        }

    def _summary(self) -> str:
        parts = []
        for name, messages in self.messages().items():
            parts.extend(f"{name}: {message}" for message in messages)
        return "; ".join(parts) or "Validation failed"
