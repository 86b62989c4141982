from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any

from kmdash.time_utils import parse_iso_date


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(ValueError):
    """
    422-level input problem.

    Carries field -> [messages]; a plain string becomes a non-field error
    under the "_" key.
    """

    def __init__(self, errors: dict[str, list[str]] | str):
        if isinstance(errors, str):
            errors = {"_": [errors]}
        self.errors = errors
        first = next(iter(errors.values()), ["Invalid input"])
        super().__init__(first[0] if first else "Invalid input")


class NotFoundError(LookupError):
    """404-level: the addressed record does not exist (or is soft-deleted)."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate PO number)."""


@dataclass(frozen=True)
class FieldRule:
    """
    One writable payload field.

    name: key in the JSON body
    attr: model attribute it maps to (defaults to name)
    kind: string | text | email | password | number | integer | boolean | date
          (password values are kept verbatim, never trimmed)
    """
    name: str
    kind: str = "string"
    attr: str | None = None
    required: bool = False
    nullable: bool = True
    min_value: float | None = None
    max_value: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    choices: tuple | None = None

    @property
    def target(self) -> str:
        return self.attr or self.name


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer:
    - fields: what clients are allowed to set (security boundary)
    - required rules are enforced on create only (partial=False)
    """
    fields: tuple[FieldRule, ...]

    def by_name(self) -> dict[str, FieldRule]:
        return {f.name: f for f in self.fields}


def _coerce_value(rule: FieldRule, value: Any):
    kind = rule.kind

    # Numbers - accept JSON numbers and numeric strings, never booleans
    if kind in ("number", "integer"):
        if isinstance(value, bool):
            raise ValueError(f"{rule.name} must be a number")
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValueError(f"{rule.name} must be a number")
            try:
                value = float(stripped)
            except ValueError:
                raise ValueError(f"{rule.name} must be a number")
        if not isinstance(value, (int, float)):
            raise ValueError(f"{rule.name} must be a number")
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            raise ValueError(f"{rule.name} must be a finite number")
        if kind == "integer":
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"{rule.name} must be an integer")
            return int(value)
        return float(value)

    if kind == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value in (0, 1):
            return bool(value)
        if isinstance(value, str) and value.strip().lower() in ("true", "false", "1", "0"):
            return value.strip().lower() in ("true", "1")
        raise ValueError(f"{rule.name} must be a boolean")

    if kind == "date":
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                parsed = parse_iso_date(value)
            except ValueError:
                parsed = None
            if parsed is not None:
                return parsed
        raise ValueError(f"{rule.name} must be an ISO-8601 date (YYYY-MM-DD)")

    # Strings / Text / Email
    if isinstance(value, (dict, list)):
        raise ValueError(f"{rule.name} must be a string")
    if kind == "password":
        if not isinstance(value, str):
            raise ValueError(f"{rule.name} must be a string")
        return value
    text = str(value).strip()
    if kind == "email" and text and not EMAIL_RE.match(text):
        raise ValueError(f"{rule.name} must be a valid email address")
    return text


def _check_rules(rule: FieldRule, value: Any) -> list[str]:
    problems = []
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if rule.min_value is not None and value < rule.min_value:
            problems.append(f"{rule.name} must be at least {rule.min_value:g}")
        if rule.max_value is not None and value > rule.max_value:
            problems.append(f"{rule.name} must be at most {rule.max_value:g}")
    if isinstance(value, str):
        if rule.min_length is not None and len(value) < rule.min_length:
            problems.append(f"{rule.name} must be at least {rule.min_length} characters")
        if rule.max_length is not None and len(value) > rule.max_length:
            problems.append(f"{rule.name} exceeds max length {rule.max_length}")
    if rule.choices is not None and value not in rule.choices:
        problems.append(f"{rule.name} must be one of: {', '.join(str(c) for c in rule.choices)}")
    return problems


def validate_payload(
    *,
    payload: Any,
    policy: PayloadPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes an incoming JSON body against a PayloadPolicy.

    Returns {model_attr: cleaned_value} for the fields present.
    Raises ValidationError with every field problem found, not just the first.

    partial=False: create semantics (enforce required fields)
    partial=True: update semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    rules = policy.by_name()
    errors: dict[str, list[str]] = {}

    for key in payload.keys():
        if key not in rules:
            errors.setdefault(key, []).append(f"Field not allowed: {key}")

    if not partial:
        for rule in policy.fields:
            if rule.required and _is_blank(payload.get(rule.name)):
                errors.setdefault(rule.name, []).append(f"{rule.name} is required")

    cleaned: dict = {}
    for key, raw in payload.items():
        rule = rules.get(key)
        if rule is None or key in errors:
            continue

        if _is_blank(raw):
            if rule.required or not rule.nullable:
                errors.setdefault(key, []).append(f"{key} cannot be empty")
            else:
                cleaned[rule.target] = None
            continue

        try:
            value = _coerce_value(rule, raw)
        except ValueError as exc:
            errors.setdefault(key, []).append(str(exc))
            continue

        problems = _check_rules(rule, value)
        if problems:
            errors.setdefault(key, []).extend(problems)
            continue

        cleaned[rule.target] = value

    if errors:
        raise ValidationError(errors)
    return cleaned


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def page_params(args, default_limit: int = 100, max_limit: int = 500) -> tuple[int, int]:
    """limit/offset from query args, clamped to [1, max_limit] and >= 0."""
    limit = args.get("limit", default_limit, type=int)
    offset = args.get("offset", 0, type=int)
    if limit is None or limit < 1:
        limit = 1
    if limit > max_limit:
        limit = max_limit
    if offset is None or offset < 0:
        offset = 0
    return limit, offset


def bool_arg(args, name: str, default: bool = False) -> bool:
    value = args.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes")
