# Stock Lookup - turns resolved store/product identities into inventory answers
# Pure reads over a CatalogSnapshot

import logging
from typing import List, Optional

from .catalog_client import CatalogSnapshot
from .models import (
    ErrorKind, InventoryItem, ResolutionOutcome, ResolutionStatus, ResultKind,
    StockEntry, StockLevel, StockResult, Store,
)
from .normalizer import normalize, normalize_text

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3


def classify(item: InventoryItem) -> StockLevel:
    """Stock level of one item against its own reorder threshold."""
    if item.qty <= 0:
        return StockLevel.OUT_OF_STOCK
    if item.qty <= item.reorder_threshold:
        return StockLevel.LOW_STOCK
    return StockLevel.IN_STOCK


def _distinct_names(items) -> List[str]:
    names, seen = [], set()
    for item in items:
        key = normalize_text(item.name)
        if key not in seen:
            seen.add(key)
            names.append(item.name)
    return names


def _suggestions(product_text: str, items) -> List[str]:
    """Products sharing a category word with the query."""
    query_tokens = normalize(product_text)
    related = [i for i in items if i.category and normalize(i.category) & query_tokens]
    return _distinct_names(related)[:MAX_SUGGESTIONS]


def _item_at_store(snapshot: CatalogSnapshot, store: Store, product_name: str) -> StockResult:
    wanted = normalize_text(product_name)
    for item in snapshot.list_items_by_store(store.id):
        if normalize_text(item.name) == wanted:
            level = classify(item)
            return StockResult(ResultKind.ITEM, store=store, item=item, level=level,
                               entries=[StockEntry(store, item, level)])
    return StockResult(ResultKind.ITEM, ErrorKind.PRODUCT_NOT_FOUND, store=store)


def _item_anywhere(snapshot: CatalogSnapshot, product_name: str) -> StockResult:
    entries = [StockEntry(snapshot.store_by_id(i.store_id), i, classify(i))
               for i in snapshot.list_items_by_name(product_name)]
    if len(entries) == 1:
        e = entries[0]
        return StockResult(ResultKind.ITEM, store=e.store, item=e.item, level=e.level, entries=entries)
    return StockResult(ResultKind.MULTI_STORE, item=entries[0].item, entries=entries)


def _with_texts(result: StockResult, store_outcome, product_outcome) -> StockResult:
    result.location_text = store_outcome.query_text or ""
    result.product_text = product_outcome.query_text or ""
    return result


def lookup(store_outcome: ResolutionOutcome, product_outcome: ResolutionOutcome,
           snapshot: CatalogSnapshot) -> StockResult:
    """
    Answer a stock question from two resolution outcomes.

    `product_outcome` holds inventory items (from any store); the store
    outcome narrows them. Ambiguous outcomes carry a best-effort `fallback`
    computed with the primary candidate.
    """
    if store_outcome.status is ResolutionStatus.NOT_FOUND:
        return _with_texts(StockResult(error=ErrorKind.LOCATION_NOT_FOUND), store_outcome, product_outcome)

    store = store_outcome.primary
    if product_outcome.status in (ResolutionStatus.NOT_FOUND, ResolutionStatus.NOT_REQUESTED):
        resolved = store_outcome.entity
        pool = snapshot.list_items_by_store(resolved.id) if resolved is not None else snapshot.items
        result = StockResult(error=ErrorKind.PRODUCT_NOT_FOUND, store=resolved,
                             suggestions=_suggestions(product_outcome.query_text, pool))
        return _with_texts(result, store_outcome, product_outcome)

    if store_outcome.status is ResolutionStatus.RESOLVED_AMBIGUOUS:
        single = ResolutionOutcome(ResolutionStatus.RESOLVED_SINGLE, store_outcome.query_text,
                                   store_outcome.candidates[:1])
        result = StockResult(error=ErrorKind.AMBIGUOUS_LOCATION, store=store,
                             candidates=store_outcome.candidate_names,
                             fallback=lookup(single, product_outcome, snapshot))
        return _with_texts(result, store_outcome, product_outcome)

    names = _distinct_names(c.entity for c in product_outcome.candidates)
    if len(names) > 1:
        # Fall back to the primary product; same-name rows in other stores come along
        primary = normalize_text(names[0])
        kept = [c for c in product_outcome.candidates if normalize_text(c.entity.name) == primary]
        single = ResolutionOutcome(ResolutionStatus.RESOLVED_SINGLE, product_outcome.query_text, kept)
        result = StockResult(error=ErrorKind.AMBIGUOUS_PRODUCT, candidates=names,
                             fallback=lookup(store_outcome, single, snapshot))
        return _with_texts(result, store_outcome, product_outcome)

    if store is None:
        result = _item_anywhere(snapshot, names[0])
    else:
        result = _item_at_store(snapshot, store, names[0])
    logger.debug("Lookup '%s' @ '%s' -> %s", product_outcome.query_text, store_outcome.query_text,
                 result.error.name if result.error else result.kind.name)
    return _with_texts(result, store_outcome, product_outcome)


def summarize_store(store_outcome: ResolutionOutcome, snapshot: CatalogSnapshot,
                    limit: int = 10) -> StockResult:
    """Low and out-of-stock items at one store, for location-only questions."""
    if store_outcome.status is ResolutionStatus.NOT_FOUND:
        return StockResult(ResultKind.STORE_SUMMARY, ErrorKind.LOCATION_NOT_FOUND,
                           location_text=store_outcome.query_text)

    store = store_outcome.primary
    if store_outcome.status is ResolutionStatus.RESOLVED_AMBIGUOUS:
        single = ResolutionOutcome(ResolutionStatus.RESOLVED_SINGLE, store_outcome.query_text,
                                   store_outcome.candidates[:1])
        return StockResult(ResultKind.STORE_SUMMARY, ErrorKind.AMBIGUOUS_LOCATION,
                           location_text=store_outcome.query_text, store=store,
                           candidates=store_outcome.candidate_names,
                           fallback=summarize_store(single, snapshot, limit))

    items = snapshot.list_items_by_store(store.id)
    entries = [StockEntry(store, i, classify(i)) for i in items]
    flagged = [e for e in entries if e.level is not StockLevel.IN_STOCK]
    return StockResult(ResultKind.STORE_SUMMARY, location_text=store_outcome.query_text,
                       store=store, entries=flagged[:limit], total_items=len(entries))


def low_stock_report(snapshot: CatalogSnapshot, limit: int = 10,
                     store: Optional[Store] = None) -> StockResult:
    """Items at or below their reorder threshold, across all stores or one."""
    items = snapshot.list_items_by_store(store.id) if store is not None else snapshot.items
    low = [StockEntry(snapshot.store_by_id(i.store_id), i, classify(i))
           for i in items if i.qty <= i.reorder_threshold]
    return StockResult(ResultKind.LOW_STOCK_LIST, store=store, entries=low[:limit],
                       total_items=len(low))
