"""Field reconciliation: normalization, comparison and the review surface."""

from __future__ import annotations

from .compare import (
    CLIENT_FIELDS,
    PET_FIELDS,
    PET_INFO_FIELDS,
    FieldComparison,
    FieldStatus,
    compare_client,
    compare_pet,
    compare_values,
    has_changes,
)
from .normalize import (
    ParsedAddress,
    digits_only,
    format_address,
    map_sex_value,
    normalize_email,
    normalize_mobile,
    parse_address,
)
from .review import QuestionnaireReview, ReconciliationLoadError, ReconciliationResult

__all__ = [
    "CLIENT_FIELDS",
    "PET_FIELDS",
    "PET_INFO_FIELDS",
    "FieldComparison",
    "FieldStatus",
    "ParsedAddress",
    "QuestionnaireReview",
    "ReconciliationLoadError",
    "ReconciliationResult",
    "compare_client",
    "compare_pet",
    "compare_values",
    "digits_only",
    "format_address",
    "has_changes",
    "map_sex_value",
    "normalize_email",
    "normalize_mobile",
    "parse_address",
]
