# Data model for the SmartStock query engine
# Stores and inventory items are read-only snapshots; everything else is per-request

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from .normalizer import normalize


@dataclass(frozen=True)
class Store:
    """A store in the store directory"""
    id: str
    display_name: str

    @property
    def name_tokens(self) -> Set[str]:
        return normalize(self.display_name)


@dataclass(frozen=True)
class InventoryItem:
    """One product line held by one store"""
    id: str
    store_id: str
    name: str
    sku: str = ""
    qty: int = 0
    reorder_threshold: int = 5
    category: str = ""

    @property
    def display_name(self) -> str:
        return self.name


def _first_text(value: Any) -> str:
    # Dialogflow sends list-valued parameters for "is list" slots
    if isinstance(value, (list, tuple)):
        for v in value:
            text = _first_text(v)
            if text:
                return text
        return ""
    if value is None:
        return ""
    return str(value).strip()


@dataclass
class Query:
    """A stock question as extracted by the conversational platform"""
    raw_product_text: str = ""
    raw_location_text: str = ""
    intent_name: str = ""
    query_text: str = ""  # diagnostics only, never matched

    @property
    def has_product(self) -> bool:
        return bool(self.raw_product_text.strip())

    @property
    def has_location(self) -> bool:
        return bool(self.raw_location_text.strip())

    @classmethod
    def from_webhook(cls, payload: Dict[str, Any]) -> 'Query':
        """Build a Query from a Dialogflow webhook request body."""
        if not isinstance(payload, dict):
            payload = {}
        qr = payload.get('queryResult') or {}
        intent = qr.get('intent') or {}
        params = qr.get('parameters') or {}
        if not isinstance(params, dict):
            params = {}
        return cls(
            raw_product_text=_first_text(params.get('product')) or _first_text(params.get('any')),
            raw_location_text=_first_text(params.get('location')) or _first_text(params.get('store')),
            intent_name=_first_text(intent.get('displayName') if isinstance(intent, dict) else ''),
            query_text=_first_text(qr.get('queryText')),
        )


class MatchKind(Enum):
    EXACT_TOKENSET = 'exact_tokenset'
    SUBSTRING_FALLBACK = 'substring_fallback'


@dataclass
class MatchCandidate:
    entity: Any
    matched_token_count: int
    match_kind: MatchKind


class ResolutionStatus(Enum):
    RESOLVED_SINGLE = 'resolved_single'
    RESOLVED_AMBIGUOUS = 'resolved_ambiguous'
    NOT_FOUND = 'not_found'
    NOT_REQUESTED = 'not_requested'


@dataclass
class ResolutionOutcome:
    """Result of resolving one free-text parameter against a catalog"""
    status: ResolutionStatus
    query_text: str = ""
    candidates: List[MatchCandidate] = field(default_factory=list)

    @property
    def primary(self) -> Optional[Any]:
        """First candidate in catalog order, the tie-break suggestion."""
        return self.candidates[0].entity if self.candidates else None

    @property
    def entity(self) -> Optional[Any]:
        if self.status is ResolutionStatus.RESOLVED_SINGLE:
            return self.primary
        return None

    @property
    def candidate_names(self) -> List[str]:
        return [c.entity.display_name for c in self.candidates]


class StockLevel(Enum):
    IN_STOCK = 'in stock'
    LOW_STOCK = 'low stock'
    OUT_OF_STOCK = 'out of stock'


class ErrorKind(Enum):
    LOCATION_NOT_FOUND = 'location_not_found'
    PRODUCT_NOT_FOUND = 'product_not_found'
    AMBIGUOUS_LOCATION = 'ambiguous_location'
    AMBIGUOUS_PRODUCT = 'ambiguous_product'
    CATALOG_UNAVAILABLE = 'catalog_unavailable'


class ResultKind(Enum):
    ITEM = 'item'
    MULTI_STORE = 'multi_store'
    STORE_SUMMARY = 'store_summary'
    LOW_STOCK_LIST = 'low_stock_list'


@dataclass
class StockEntry:
    store: Optional[Store]
    item: InventoryItem
    level: StockLevel


@dataclass
class StockResult:
    """Everything the composer needs to answer one query"""
    kind: ResultKind = ResultKind.ITEM
    error: Optional[ErrorKind] = None
    product_text: str = ""
    location_text: str = ""
    store: Optional[Store] = None
    item: Optional[InventoryItem] = None
    level: Optional[StockLevel] = None
    entries: List[StockEntry] = field(default_factory=list)
    candidates: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    fallback: Optional['StockResult'] = None
    total_items: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None
