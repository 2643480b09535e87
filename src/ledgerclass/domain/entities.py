"""Domain model entities for ledgerclass.

These are pure data classes representing business concepts, independent of
database schema. The store hands back loosely shaped rows; the mappers turn
them into these closed types before any classification logic sees them.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional


CLASSIFICATION_FIELDS = ("type", "category_1", "sub_category", "classification")


class HierarchyLevel(IntEnum):
    """Position of an account code in the four-level hierarchy (1 coarsest)."""

    GRAND_TOTAL = 1
    FAMILY_ROOT = 2
    SUBCATEGORY = 3
    DETAIL = 4


class ClassificationStatus(str, Enum):
    """Whether a ledger row carries a complete classification."""

    CLASSIFIED = "CLASSIFIED"
    UNCLASSIFIED = "UNCLASSIFIED"


class Strategy(str, Enum):
    """Recommended way to classify a family of sibling accounts."""

    DETAIL_CLASSIFICATION = "DETAIL_CLASSIFICATION"
    SUMMARY_CLASSIFICATION = "SUMMARY_CLASSIFICATION"
    HIGH_LEVEL_CLASSIFICATION = "HIGH_LEVEL_CLASSIFICATION"


class VarianceStatus(str, Enum):
    """Outcome of comparing a parent amount with the sum of its children."""

    PERFECT = "PERFECT"
    MINOR_VARIANCE = "MINOR_VARIANCE"
    MAJOR_VARIANCE = "MAJOR_VARIANCE"
    CRITICAL_MISMATCH = "CRITICAL_MISMATCH"


class ConflictKind(str, Enum):
    """Why classifying an account would count its amount twice."""

    PARENT_ALREADY_CLASSIFIED = "PARENT_ALREADY_CLASSIFIED"
    CHILDREN_ALREADY_CLASSIFIED = "CHILDREN_ALREADY_CLASSIFIED"


@dataclass(frozen=True)
class Classification:
    """The (type, category-1, sub-category, final classification) tuple."""

    type: Optional[str] = None
    category_1: Optional[str] = None
    sub_category: Optional[str] = None
    classification: Optional[str] = None

    def merged(self, updates: "Classification | dict") -> "Classification":
        """Return a copy with every non-empty value from updates applied.

        An omitted or empty value keeps the current one; it never clears it.
        """
        if isinstance(updates, Classification):
            updates = updates.as_dict()
        changes = {name: updates[name] for name in CLASSIFICATION_FIELDS if updates.get(name)}
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Optional[str]]:
        """Return the four fields as a plain dict."""
        return {name: getattr(self, name) for name in CLASSIFICATION_FIELDS}


@dataclass(frozen=True)
class Report:
    """Uploaded ledger report domain entity."""

    id: int
    name: str
    file_name: str
    month: int
    year: int
    total_records: int
    created_at: datetime


@dataclass(frozen=True)
class LedgerRow:
    """Ledger row domain entity belonging to exactly one report."""

    id: int
    report_id: int
    code: str
    label: Optional[str]
    amount: Optional[Decimal]
    classification: Classification
    created_at: datetime
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewLedgerRow:
    """Ledger row as handed over by ingestion, before it has an ID."""

    code: str
    label: Optional[str]
    amount: Optional[Decimal]
    classification: Classification = field(default_factory=Classification)


@dataclass(frozen=True)
class ClassificationRule:
    """Durable classification rule for a single account code."""

    id: int
    account_code: str
    account_name: Optional[str]
    classification: Classification
    hierarchy_level: int
    family_code: str
    effective_from: Optional[datetime]
    effective_to: Optional[datetime]
    created_by: Optional[str]
    approved_by: Optional[str]
    updated_by: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]
    is_active: bool = True


@dataclass(frozen=True)
class RuleListing:
    """Projection of an active rule for listing."""

    rule: ClassificationRule
    usage_count: int
    last_modified: datetime


@dataclass(frozen=True)
class FamilySibling:
    """One account at the inspected level of a family."""

    code: str
    label: str
    amount: Decimal
    status: ClassificationStatus
    classification: Classification


@dataclass(frozen=True)
class FamilyContext:
    """Request-scoped view of a family at one hierarchy level."""

    family_code: str
    family_name: str
    hierarchy_level: HierarchyLevel
    siblings: tuple[FamilySibling, ...]
    classified_siblings: int
    unclassified_siblings: int
    total_siblings: int
    completeness_percentage: float
    recommended_approach: Strategy
    has_mixed_siblings: bool
    missing_amount: Decimal
    skipped_codes: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassificationSuggestion:
    """Classification proposed for an account from its siblings."""

    classification: Classification
    source: str
    confidence: float
    reasoning: str
    family_context: FamilyContext


@dataclass(frozen=True)
class RecordChange:
    """Before/after snapshot of one ledger row rewritten by a rule."""

    row_id: int
    report_id: int
    account_code: str
    old_classification: Classification
    new_classification: Classification
    amount: Decimal


@dataclass(frozen=True)
class RecordFailure:
    """A ledger row the retroactive pass could not rewrite."""

    row_id: int
    report_id: int
    reason: str


@dataclass(frozen=True)
class RetroactiveImpact:
    """Result of applying a rule change across historical reports."""

    family_code: str
    affected_records: int
    affected_reports: tuple[int, ...]
    total_financial_impact: Decimal
    changes: tuple[RecordChange, ...]
    failures: tuple[RecordFailure, ...]
    estimated_processing_time: float


@dataclass(frozen=True)
class RuleUpsertSummary:
    """Counts from upserting rules out of a list of user changes."""

    created: int
    updated: int
    total_impact: Decimal


@dataclass(frozen=True)
class HierarchyVariance:
    """Parent row whose amount disagrees with the sum of its children."""

    parent_code: str
    parent_name: Optional[str]
    parent_amount: Decimal
    children_sum: Decimal
    variance: Decimal
    variance_percentage: Decimal
    status: VarianceStatus


@dataclass(frozen=True)
class ApplyCheck:
    """Outcome of checking a proposed classification for double counting."""

    account_code: str
    valid: bool
    conflict: Optional[ConflictKind] = None
    conflicting_codes: tuple[str, ...] = ()
    financial_impact: Decimal = Decimal("0")
    message: str = ""


@dataclass(frozen=True)
class FamilyConflict:
    """A classified parent whose classified descendants are counted again."""

    family_code: str
    family_name: str
    parent_code: str
    parent_amount: Decimal
    classified_descendants: tuple[str, ...]
    financial_impact: Decimal


@dataclass(frozen=True)
class SaveResult:
    """Outcome of saving a report with its rows."""

    report_id: int
    saved_records: int
    total_amount: Decimal


@dataclass(frozen=True)
class ClassificationSummary:
    """Classified/unclassified totals over a batch of incoming rows."""

    total_accounts: int
    classified_accounts: int
    unclassified_accounts: int
    total_amount: Decimal
    classified_amount: Decimal
    unclassified_amount: Decimal
    unclassified_rows: tuple[NewLedgerRow, ...] = ()


@dataclass(frozen=True)
class HistoryEntry:
    """Classification of one account code in one report."""

    report_id: int
    report_name: str
    report_date: datetime
    amount: Decimal
    classification: Classification
    applied_at: datetime
