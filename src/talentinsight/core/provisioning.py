from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from talentinsight.config import Settings
from talentinsight.core.catalog import QuestionCatalog
from talentinsight.errors import InvalidSubmissionError
from talentinsight.types import AttributeType

_WHITESPACE = re.compile(r"\s+")
_TRUE_TOKENS = frozenset({"true", "yes", "y", "1", "x"})
_FALSE_TOKENS = frozenset({"false", "no", "n", "0", ""})
_ATTRIBUTE_TYPES = frozenset({"personal", "organizational"})


@dataclass(frozen=True, slots=True)
class ProvisioningPolicy:
    """Defaults fabricated when an operation references a missing company.

    Used by sign-up, the settings endpoints and the preferences batch import.
    """

    placeholder_email_domain: str = "example.csv.com"
    default_total_interviews: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> ProvisioningPolicy:
        return cls(
            placeholder_email_domain=settings.placeholder_email_domain,
            default_total_interviews=settings.default_total_interviews,
        )

    def placeholder_email(self, company_name: str) -> str:
        local_part = _WHITESPACE.sub(".", company_name.strip().lower())
        return f"{local_part}@{self.placeholder_email_domain}"

    def default_company_name(self, company_id: str) -> str:
        return f"Company {company_id}"


@dataclass(frozen=True, slots=True)
class AttributeTypeMap:
    """Explicit attribute-name -> attribute-type mapping for preference imports."""

    mapping: Mapping[str, AttributeType] = field(default_factory=dict)
    default: AttributeType = "organizational"

    def __post_init__(self) -> None:
        folded: dict[str, AttributeType] = {}
        for name, attribute_type in self.mapping.items():
            if attribute_type not in _ATTRIBUTE_TYPES:
                raise ValueError(f"attribute type for '{name}' must be personal or organizational")
            folded[name.strip().casefold()] = attribute_type
        object.__setattr__(self, "mapping", folded)

    @classmethod
    def from_catalog(
        cls,
        catalog: QuestionCatalog,
        overrides: Mapping[str, str] | None = None,
    ) -> AttributeTypeMap:
        mapping: dict[str, Any] = {}
        for code, question_ids in catalog.topics().items():
            mapping[code] = catalog.scope_of(question_ids[0])
        mapping.update(overrides or {})
        return cls(mapping=mapping)

    def classify(self, attribute_name: str) -> AttributeType:
        return self.mapping.get(attribute_name.strip().casefold(), self.default)


def coerce_bool(value: Any, *, column: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE_TOKENS:
        return True
    if isinstance(value, str) and value.strip().lower() in _FALSE_TOKENS:
        return False
    raise InvalidSubmissionError(f"assessment '{column}' must be true or false, got {value!r}")


def coerce_rank(value: Any, *, column: str) -> int:
    if isinstance(value, bool):
        raise InvalidSubmissionError(f"rank '{column}' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidSubmissionError(f"rank '{column}' must be an integer, got {value!r}")
