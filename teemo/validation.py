"""
TEEMO - Field Validation
========================
Declarative rule sets checked against submitted form data.

Each field carries an ordered list of rules. The first rule that fails
sets that field's message and the field's remaining rules are skipped.

Usage:
    result = validate(
        {"email": email, "password": password},
        {"email": [Required(), Email()], "password": [Required(), MinLength(8)]},
    )
    if not result.success:
        show(result.first_error)

The older string form ("required", "minLength:8", "match:password") is
still accepted and parsed into the same rule objects.
"""

import re
from dataclasses import dataclass
from typing import Optional, Dict, List, Mapping, Sequence, Union
from pydantic import BaseModel, Field


EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


@dataclass(frozen=True)
class Required:
    """Value must contain something other than whitespace"""


@dataclass(frozen=True)
class Email:
    """Non-empty value must look like local@domain.tld"""


@dataclass(frozen=True)
class MinLength:
    length: int


@dataclass(frozen=True)
class MaxLength:
    length: int


@dataclass(frozen=True)
class Match:
    """Value must equal a sibling field (password confirmation)"""
    field: str


Rule = Union[Required, Email, MinLength, MaxLength, Match]
RuleSet = Mapping[str, Sequence[Union[Rule, str]]]


class ValidationResult(BaseModel):
    success: bool
    errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def first_error(self) -> Optional[str]:
        """Message for the first failing field, as shown in the error banner"""
        return next(iter(self.errors.values()), None)


def parse_rule(text: str) -> Rule:
    """Turn a rule string like "maxLength:50" into a rule object"""
    name, _, arg = text.partition(":")
    if name == "required" and not arg:
        return Required()
    if name == "email" and not arg:
        return Email()
    if name in ("minLength", "maxLength"):
        try:
            length = int(arg)
        except ValueError:
            raise ValueError(f"Rule {text!r} needs an integer length") from None
        return MinLength(length) if name == "minLength" else MaxLength(length)
    if name == "match" and arg:
        return Match(arg)
    raise ValueError(f"Unknown validation rule: {text!r}")


def parse_rules(rules: Sequence[Union[Rule, str]]) -> List[Rule]:
    return [parse_rule(r) if isinstance(r, str) else r for r in rules]


def check_rule(rule: Rule, value: str, data: Mapping[str, Optional[str]]) -> Optional[str]:
    """Return the error message if `value` fails `rule`, else None"""
    match rule:
        case Required():
            if not value.strip():
                return "Required field"
        case Email():
            if value and not EMAIL_PATTERN.fullmatch(value):
                return "Invalid email format"
        case MinLength(length=n):
            if value and len(value) < n:
                return f"Must be at least {n} characters"
        case MaxLength(length=n):
            if value and len(value) > n:
                return f"Must be {n} characters or less"
        case Match(field=other):
            if value != (data.get(other) or ""):
                return "Passwords do not match"
        case _:
            raise TypeError(f"Not a validation rule: {rule!r}")
    return None


def validate(data: Mapping[str, Optional[str]], rules: RuleSet) -> ValidationResult:
    """Check `data` against `rules`; missing values count as empty strings"""
    errors: Dict[str, str] = {}

    for field_name, field_rules in rules.items():
        value = data.get(field_name) or ""
        for rule in parse_rules(field_rules):
            message = check_rule(rule, value, data)
            if message:
                errors[field_name] = message
                break

    return ValidationResult(success=not errors, errors=errors)
