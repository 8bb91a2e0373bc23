from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from talentinsight.types import AttributeType

GEN_Z_SURVEY_QUESTION_IDS: tuple[str, ...] = (
    "QP_MC_1", "QP_MC_2", "QP_MC_3", "QP_MC_4", "QP_MC_5",
    "QP_R_1", "QP_R_2", "QP_R_3", "QP_R_4", "QP_R_5", "QP_R_6",
    "QP_CS_1", "QP_CS_2", "QP_CS_3", "QP_CS_4",
    "QP_TW_1", "QP_TW_2", "QP_TW_3", "QP_TW_4", "QP_TW_5", "QP_TW_6",
    "QP_P_1", "QP_P_2", "QP_P_3", "QP_P_4", "QP_P_5", "QP_P_6", "QP_P_7",
    "QP_IS_1", "QP_IS_2", "QP_IS_3", "QP_IS_4", "QP_IS_5",
    "QP_AD_1", "QP_AD_2", "QP_AD_3", "QP_AD_4", "QP_AD_5",
    "QO_C_1", "QO_C_2", "QO_C_3", "QO_C_4", "QO_C_5",
    "QO_WC_1", "QO_WC_2", "QO_WC_3", "QO_WC_4", "QO_WC_5", "QO_WC_6",
    "QO_SC_1", "QO_SC_2", "QO_SC_3", "QO_SC_4", "QO_SC_5",
    "QO_ER_1", "QO_ER_2", "QO_ER_3",
    "QO_OV_1", "QO_OV_2", "QO_OV_3", "QO_OV_4",
    "QO_DG_1", "QO_DG_2",
)


def topic_code(question_id: str) -> str:
    """Topic prefix of a question id: ``QP_MC_3`` -> ``QP_MC``."""
    head, _, tail = question_id.rpartition("_")
    return head if head and tail.isdigit() else question_id


@dataclass(frozen=True, slots=True)
class QuestionCatalog:
    """Closed, ordered set of survey question identifiers.

    Each identifier is one column of the historical table. Lookups by exact id
    go through :meth:`contains`; bulk imports use :meth:`resolve`, which
    ignores case.
    """

    ids: tuple[str, ...]
    _lookup: frozenset[str] = field(init=False, repr=False, compare=False)
    _folded: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ids = tuple(self.ids)
        folded: dict[str, str] = {}
        for question_id in ids:
            if not question_id:
                raise ValueError("question ids must be non-empty")
            key = question_id.casefold()
            if key in folded:
                raise ValueError(f"duplicate question id '{question_id}'")
            folded[key] = question_id
        object.__setattr__(self, "ids", ids)
        object.__setattr__(self, "_lookup", frozenset(ids))
        object.__setattr__(self, "_folded", folded)

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> QuestionCatalog:
        return cls(ids=tuple(ids))

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def contains(self, question_id: str) -> bool:
        return question_id in self._lookup

    def all_ids(self) -> tuple[str, ...]:
        return self.ids

    def resolve(self, key: str) -> str | None:
        return self._folded.get(key.strip().casefold())

    def topics(self) -> dict[str, tuple[str, ...]]:
        grouped: dict[str, list[str]] = {}
        for question_id in self.ids:
            grouped.setdefault(topic_code(question_id), []).append(question_id)
        return {code: tuple(items) for code, items in grouped.items()}

    def scope_of(self, question_id: str) -> AttributeType:
        return "personal" if question_id.upper().startswith("QP_") else "organizational"


DEFAULT_CATALOG = QuestionCatalog(ids=GEN_Z_SURVEY_QUESTION_IDS)
