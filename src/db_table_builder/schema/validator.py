"""Structural and semantic validation of table definitions.

Pure logic with no I/O.  The rule set is fixed: each rule is a plain
function returning the issues it found, and ``SchemaValidator`` runs all
of them and reports every issue at once.

Usage:
    from db_table_builder.schema.validator import SchemaValidator

    SchemaValidator().validate(table_schema, "acme")
"""

import re
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from db_table_builder.errors import (
    ConfigurationError,
    ReasonCode,
    TypeConstraintError,
    ValidationError,
    ValidationIssue,
)
from db_table_builder.schema.models import TableSchema
from db_table_builder.schema.types import ColumnTypeRegistry, registry as default_registry

TABLE_NAME_PATTERN = re.compile(r"^[a-z]+[a-z0-9_]+$")
COLUMN_NAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$")


@dataclass(frozen=True)
class RuleContext:
    """Inputs shared by all rules of one validation run."""

    table: TableSchema
    prefix: str
    registry: ColumnTypeRegistry


@dataclass(frozen=True)
class Rule:
    name: str
    field: str
    check: Callable[[RuleContext], Iterable[ValidationIssue]]


# ------------------------------------------------------------------
# Table name rules
# ------------------------------------------------------------------


def check_table_name(ctx: RuleContext) -> list[ValidationIssue]:
    name = ctx.table.name.strip()
    if not name:
        return [ValidationIssue(ReasonCode.REQUIRED)]
    if not TABLE_NAME_PATTERN.match(name):
        return [ValidationIssue(ReasonCode.INVALID_NAME, {"name": name})]
    return []


def check_table_prefix(ctx: RuleContext) -> list[ValidationIssue]:
    name = ctx.table.name.strip()
    if name and not name.startswith(ctx.prefix):
        return [ValidationIssue(ReasonCode.INVALID_PREFIX, {"prefix": ctx.prefix, "name": name})]
    return []


# ------------------------------------------------------------------
# Column rules
# ------------------------------------------------------------------


def check_column_names(ctx: RuleContext) -> list[ValidationIssue]:
    issues = []
    for column in ctx.table.columns:
        if not COLUMN_NAME_PATTERN.match(column.name):
            issues.append(ValidationIssue(ReasonCode.INVALID_COLUMN_NAME, {"column": column.name}))
        if not ctx.registry.is_known(column.type):
            issues.append(
                ValidationIssue(ReasonCode.UNKNOWN_TYPE, {"column": column.name, "type": column.type})
            )
    return issues


def check_duplicate_columns(ctx: RuleContext) -> list[ValidationIssue]:
    counts = Counter(column.name for column in ctx.table.columns)
    return [
        ValidationIssue(ReasonCode.DUPLICATE_COLUMN, {"column": name})
        for name, count in counts.items()
        if count > 1
    ]


def check_primary_keys(ctx: RuleContext) -> list[ValidationIssue]:
    keys = [column.name for column in ctx.table.columns if column.primary_key]
    if len(keys) > 1:
        return [ValidationIssue(ReasonCode.MULTIPLE_PRIMARY_KEYS, {"columns": keys})]
    return []


def check_auto_increment(ctx: RuleContext) -> list[ValidationIssue]:
    columns = [column for column in ctx.table.columns if column.auto_increment]
    issues = []
    if len(columns) > 1:
        issues.append(
            ValidationIssue(
                ReasonCode.MULTIPLE_AUTO_INCREMENT, {"columns": [c.name for c in columns]}
            )
        )
    for column in columns:
        if not ctx.registry.is_integer(column.type):
            issues.append(
                ValidationIssue(
                    ReasonCode.AUTO_INCREMENT_NON_INTEGER,
                    {"column": column.name, "type": column.type},
                )
            )
    return issues


def check_column_lengths(ctx: RuleContext) -> list[ValidationIssue]:
    issues = []
    for column in ctx.table.columns:
        if not ctx.registry.is_known(column.type):
            continue
        try:
            ctx.registry.validate_length(column.type, column.length)
        except TypeConstraintError as e:
            issues.append(
                ValidationIssue(
                    ReasonCode.ILLEGAL_LENGTH,
                    {
                        "column": column.name,
                        "type": column.type,
                        "length": column.length,
                        "constraint": e.code.value,
                        "detail": str(e),
                    },
                    cause=e,
                )
            )
    return issues


def check_unsigned(ctx: RuleContext) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            ReasonCode.UNSIGNED_NON_INTEGER, {"column": column.name, "type": column.type}
        )
        for column in ctx.table.columns
        if column.unsigned and not ctx.registry.is_integer(column.type)
    ]


RULES: tuple[Rule, ...] = (
    Rule("table_name", "name", check_table_name),
    Rule("table_prefix", "name", check_table_prefix),
    Rule("column_names", "columns", check_column_names),
    Rule("duplicate_columns", "columns", check_duplicate_columns),
    Rule("primary_keys", "columns", check_primary_keys),
    Rule("auto_increment", "columns", check_auto_increment),
    Rule("column_lengths", "columns", check_column_lengths),
    Rule("unsigned", "columns", check_unsigned),
)


class SchemaValidator:
    """Runs every rule against a table definition and aggregates the issues."""

    def __init__(
        self,
        rules: tuple[Rule, ...] = RULES,
        registry: ColumnTypeRegistry = default_registry,
    ):
        self.rules = rules
        self.registry = registry

    def validate(self, table: TableSchema, namespace_prefix: str) -> None:
        """Validate ``table`` for the namespace ``namespace_prefix``.

        Args:
            table: Table definition to check.
            namespace_prefix: Namespace the table belongs to, without the
                trailing underscore (``"acme"`` requires ``acme_...`` names).

        Raises:
            ConfigurationError: If the namespace prefix is empty.
            ValidationError: If any rule reports an issue.  A length issue
                is chained as the error's cause.
        """
        ctx = RuleContext(table=table, prefix=table_prefix(namespace_prefix), registry=self.registry)

        issues: dict[str, list[ValidationIssue]] = {}
        for rule in self.rules:
            found = list(rule.check(ctx))
            if found:
                issues.setdefault(rule.field, []).extend(found)

        if issues:
            raise ValidationError(issues) from _first_type_error(issues)


def table_prefix(namespace_prefix: str | None) -> str:
    """Return the required table name prefix (``"acme"`` -> ``"acme_"``).

    Raises:
        ConfigurationError: If the namespace prefix is empty.
    """
    prefix = (namespace_prefix or "").strip()
    if not prefix:
        raise ConfigurationError(
            "The database prefix is not set: cannot validate the table name."
        )
    return f"{prefix}_"


def _first_type_error(issues: dict[str, list[ValidationIssue]]) -> TypeConstraintError | None:
    for found in issues.values():
        for issue in found:
            if isinstance(issue.cause, TypeConstraintError):
                return issue.cause
    return None
