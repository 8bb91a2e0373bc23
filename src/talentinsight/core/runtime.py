from __future__ import annotations

from talentinsight.config import get_settings
from talentinsight.core.catalog import DEFAULT_CATALOG, QuestionCatalog
from talentinsight.core.provisioning import AttributeTypeMap, ProvisioningPolicy

_ATTRIBUTE_TYPES: AttributeTypeMap | None = None


def get_question_catalog() -> QuestionCatalog:
    return DEFAULT_CATALOG


def get_attribute_type_map() -> AttributeTypeMap:
    global _ATTRIBUTE_TYPES
    if _ATTRIBUTE_TYPES is None:
        overrides = get_settings().attribute_type_overrides
        _ATTRIBUTE_TYPES = AttributeTypeMap.from_catalog(get_question_catalog(), overrides)
    return _ATTRIBUTE_TYPES


def get_provisioning_policy() -> ProvisioningPolicy:
    return ProvisioningPolicy.from_settings(get_settings())
