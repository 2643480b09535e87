"""Classification status evaluation."""

from typing import Optional, Union

from ledgerclass.config import Sentinels
from ledgerclass.domain.entities import (
    CLASSIFICATION_FIELDS,
    Classification,
    ClassificationStatus,
    LedgerRow,
    NewLedgerRow,
)

Classifiable = Union[Classification, LedgerRow, NewLedgerRow]


def classification_status(
    item: Classifiable, sentinels: Optional[Sentinels] = None
) -> ClassificationStatus:
    """Return CLASSIFIED iff every classification field is set.

    A field counts as set when it is non-empty and differs from its sentinel.

    Args:
        item: Classification, or a row carrying one
        sentinels: Placeholder values (defaults to Sentinels())

    Returns:
        ClassificationStatus
    """
    sentinels = sentinels or Sentinels()
    classification = item if isinstance(item, Classification) else item.classification
    for name in CLASSIFICATION_FIELDS:
        value = getattr(classification, name)
        if not value or value == getattr(sentinels, name):
            return ClassificationStatus.UNCLASSIFIED
    return ClassificationStatus.CLASSIFIED


def is_classified(item: Classifiable, sentinels: Optional[Sentinels] = None) -> bool:
    return classification_status(item, sentinels) == ClassificationStatus.CLASSIFIED


def unset_classification(sentinels: Optional[Sentinels] = None) -> Classification:
    """Return a classification holding only sentinel values."""
    sentinels = sentinels or Sentinels()
    return Classification(**{name: getattr(sentinels, name) for name in CLASSIFICATION_FIELDS})
