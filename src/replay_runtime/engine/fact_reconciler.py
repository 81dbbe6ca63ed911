"""
Fact Reconciler - Cross-check one count across UI, database and API.

A verification step captures the same business fact three ways: the
rendered page (an HTML fragment), a database query (row-sets) and a service
call (payloads). The check passes only when all three independently report
the same integer.

A disagreement, or a source that does not carry the fact at all, is a normal
``False`` result. Only inputs of the wrong container type raise.

Example:
    >>> reconciler = FactReconciler()
    >>> reconciler.verify(
    ...     ["<span class='stat-number'>5</span>"],
    ...     [[{"count": 5}]],
    ...     [{"total_projects": 5}],
    ... )
    True
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, TYPE_CHECKING

from replay_runtime.exceptions import InvalidInputError

if TYPE_CHECKING:
    from replay_runtime.config.settings import ReconcileSettings

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"<[^>]*>")
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?[0-9]+)")

# Captured API results wrap the decoded body under this key
PAYLOAD_ENVELOPE_KEY = "payload"


def strip_tags(fragment: str) -> str:
    """Remove markup tags, keeping the text between them."""
    return TAG_PATTERN.sub("", fragment)


def parse_int(value: Any) -> Optional[int]:
    """
    Parse a base-10 integer the lenient way recorded values need.
    
    Leading whitespace and a sign are allowed and trailing characters are
    ignored ("12 projects" -> 12). Only ASCII digits count. Returns None when
    no digits lead the text.
    Booleans and None are never numbers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = LEADING_INT_PATTERN.match(str(value))
    if not match:
        return None
    return int(match.group(1))


@dataclass
class ReconciliationResult:
    """
    Values observed per source.
    
    Attributes:
        ui_value: Integer parsed from the UI fragment (None if missing)
        db_value: Integer parsed from the DB row (None if missing)
        api_value: Integer parsed from the API payload (None if missing)
    """
    ui_value: Optional[int] = None
    db_value: Optional[int] = None
    api_value: Optional[int] = None
    
    @property
    def complete(self) -> bool:
        """True when every source yielded a number."""
        return None not in (self.ui_value, self.db_value, self.api_value)
    
    @property
    def agreed(self) -> bool:
        return self.complete and self.ui_value == self.db_value == self.api_value
    
    def to_dict(self) -> dict:
        return {
            "ui": self.ui_value,
            "db": self.db_value,
            "api": self.api_value,
            "agreed": self.agreed,
        }


class FactReconciler:
    """
    Verify that UI, database and API agree on one count.
    
    Args:
        ui_marker: Substring identifying the UI fragment to read
        db_field: Field read from the first row of a row-set
        api_field: Field read from an API payload
    """
    
    def __init__(
        self,
        ui_marker: str = "stat-number",
        db_field: str = "count",
        api_field: str = "total_projects",
    ):
        self.ui_marker = ui_marker
        self.db_field = db_field
        self.api_field = api_field
    
    @classmethod
    def from_settings(cls, settings: "ReconcileSettings") -> "FactReconciler":
        return cls(
            ui_marker=settings.ui_marker,
            db_field=settings.db_field,
            api_field=settings.api_field,
        )
    
    def verify(
        self,
        ui_fragments: Optional[Sequence[Any]],
        db_row_sets: Optional[Sequence[Any]],
        api_payloads: Optional[Sequence[Any]],
    ) -> bool:
        """
        Check that all three sources report the same integer.
        
        Args:
            ui_fragments: Captured HTML/text fragments
            db_row_sets: Query results, each a list of row mappings
            api_payloads: Decoded API bodies (or captured results that wrap
                the body under ``payload``)
            
        Returns:
            True iff all three values were found, parsed and are equal
            
        Raises:
            InvalidInputError: An argument is not a list
        """
        result = self.reconcile(ui_fragments, db_row_sets, api_payloads)
        if not result.agreed:
            logger.info(f"Sources disagree or are incomplete: {result.to_dict()}")
        return result.agreed
    
    def reconcile(
        self,
        ui_fragments: Optional[Sequence[Any]],
        db_row_sets: Optional[Sequence[Any]],
        api_payloads: Optional[Sequence[Any]],
    ) -> ReconciliationResult:
        """Extract the value from each source; see verify()."""
        ui_fragments = _as_list(ui_fragments, "ui_fragments")
        db_row_sets = _as_list(db_row_sets, "db_row_sets")
        api_payloads = _as_list(api_payloads, "api_payloads")
        
        result = ReconciliationResult(
            ui_value=self.extract_ui_value(ui_fragments),
            db_value=self.extract_db_value(db_row_sets),
            api_value=self.extract_api_value(api_payloads),
        )
        logger.debug(f"Reconciliation values: {result.to_dict()}")
        return result
    
    def extract_ui_value(self, fragments: List[Any]) -> Optional[int]:
        """First fragment containing the marker, tags stripped, parsed."""
        for fragment in fragments:
            if isinstance(fragment, str) and self.ui_marker in fragment:
                return parse_int(strip_tags(fragment).strip())
        return None
    
    def extract_db_value(self, row_sets: List[Any]) -> Optional[int]:
        """First non-empty row-set whose first row has the field, parsed."""
        for rows in row_sets:
            if not isinstance(rows, (list, tuple)) or not rows:
                continue
            first = rows[0]
            if isinstance(first, Mapping) and self.db_field in first:
                return parse_int(first[self.db_field])
        return None
    
    def extract_api_value(self, payloads: List[Any]) -> Optional[int]:
        """First payload exposing the field, directly or in an envelope."""
        for payload in payloads:
            if not isinstance(payload, Mapping):
                continue
            if self.api_field in payload:
                return parse_int(payload[self.api_field])
            inner = payload.get(PAYLOAD_ENVELOPE_KEY)
            if isinstance(inner, Mapping) and self.api_field in inner:
                return parse_int(inner[self.api_field])
        return None


def _as_list(value: Any, name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise InvalidInputError(
            f"{name} must be a list, got {type(value).__name__}",
            argument=name,
        )
    return list(value)
