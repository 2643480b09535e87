"""Tunable settings for the classification engine.

Values can be overridden through LEDGERCLASS_* environment variables, the
same way the database path is resolved from LEDGERCLASS_DB_PATH.
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Sentinels:
    """Placeholder values meaning a classification field is unset."""

    type: str = "Undefined"
    category_1: str = "No Category"
    # Sub-category only needs to be present unless a sentinel is configured
    sub_category: Optional[str] = None
    classification: str = "No Classification"


@dataclass(frozen=True)
class Settings:
    """Engine configuration."""

    # Largest level-4 family still worth classifying row by row
    detail_threshold: int = 15
    sentinels: Sentinels = field(default_factory=Sentinels)
    dominant_pattern_ratio: float = 0.6
    suggestion_confidence: float = 0.85
    # Placeholder cost heuristic, not a measured duration
    seconds_per_record: float = 0.1
    significant_change_records: int = 10
    significant_change_amount: Decimal = Decimal("1000000")

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Settings":
        """Build settings, overriding defaults from LEDGERCLASS_* variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings instance

        Raises:
            ValueError: If a variable holds a value of the wrong type
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        sentinels = Sentinels(
            type=env.get("LEDGERCLASS_SENTINEL_TYPE", defaults.sentinels.type),
            category_1=env.get("LEDGERCLASS_SENTINEL_CATEGORY", defaults.sentinels.category_1),
            sub_category=env.get("LEDGERCLASS_SENTINEL_SUB_CATEGORY", defaults.sentinels.sub_category),
            classification=env.get(
                "LEDGERCLASS_SENTINEL_CLASSIFICATION", defaults.sentinels.classification
            ),
        )
        return cls(
            detail_threshold=int(env.get("LEDGERCLASS_DETAIL_THRESHOLD", defaults.detail_threshold)),
            sentinels=sentinels,
            dominant_pattern_ratio=float(
                env.get("LEDGERCLASS_DOMINANT_PATTERN_RATIO", defaults.dominant_pattern_ratio)
            ),
            suggestion_confidence=float(
                env.get("LEDGERCLASS_SUGGESTION_CONFIDENCE", defaults.suggestion_confidence)
            ),
            seconds_per_record=float(
                env.get("LEDGERCLASS_SECONDS_PER_RECORD", defaults.seconds_per_record)
            ),
            significant_change_records=int(
                env.get("LEDGERCLASS_SIGNIFICANT_CHANGE_RECORDS", defaults.significant_change_records)
            ),
            significant_change_amount=_to_decimal(
                env.get("LEDGERCLASS_SIGNIFICANT_CHANGE_AMOUNT", str(defaults.significant_change_amount))
            ),
        )


def _to_decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value '{value}'") from e


def default_database_path() -> str:
    """Return ~/.ledgerclass/ledgerclass.db, creating the directory."""
    db_dir = Path.home() / ".ledgerclass"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "ledgerclass.db")
