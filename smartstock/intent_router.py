# Intent Router - entry point of the stock-query engine
# Every path ends in fulfillment text; nothing is raised to the caller

import logging
from typing import Optional

from .catalog_client import CatalogSnapshot
from .config import Settings
from .entity_resolver import resolve, resolve_product
from .errors import CatalogUnavailableError
from .models import ErrorKind, Query, ResolutionOutcome, ResolutionStatus, StockResult, Store
from .response_composer import ResponseComposer
from .stock_lookup import lookup, low_stock_report, summarize_store

logger = logging.getLogger(__name__)

STOCK_INTENTS = ('CheckStock', 'CheckStockAtLocation')
LOW_STOCK_INTENT = 'LowStockList'


class IntentRouter:
    """
    Sequences resolver -> lookup -> composer for one query.

    `catalog` is anything with fetch_snapshot(); it is called at most once
    per query and only when a lookup is actually needed.
    """

    def __init__(self, catalog, settings: Settings = None):
        self.catalog = catalog
        self.settings = settings or Settings()
        self.composer = ResponseComposer(self.settings.ambiguity_policy)

    def handle(self, query: Query) -> str:
        logger.info("Intent %r product=%r location=%r (said: %r)", query.intent_name,
                    query.raw_product_text, query.raw_location_text, query.query_text)

        if query.intent_name == LOW_STOCK_INTENT:
            return self._run(self._low_stock, query)

        if not (query.has_product or query.has_location):
            if query.intent_name in STOCK_INTENTS:
                return self.composer.help_text()
            return self.composer.fallback_text()

        if query.has_product:
            return self._run(self._stock, query)
        return self._run(self._store_summary, query)

    def _run(self, step, query: Query) -> str:
        try:
            snapshot = self.catalog.fetch_snapshot()
        except CatalogUnavailableError as e:
            logger.error(f"Catalog unavailable for intent {query.intent_name!r}: {e}")
            return self.composer.compose(StockResult(error=ErrorKind.CATALOG_UNAVAILABLE))
        result = step(query, snapshot)
        text = self.composer.compose(result)
        logger.debug("Fulfillment: %s", text)
        return text

    def _resolve_store(self, query: Query, snapshot: CatalogSnapshot):
        return resolve(query.raw_location_text, snapshot.list_stores(),
                       strip_punctuation=self.settings.strip_punctuation)

    def _stock(self, query: Query, snapshot: CatalogSnapshot) -> StockResult:
        store_outcome = self._resolve_store(query, snapshot)
        if store_outcome.status is ResolutionStatus.NOT_FOUND:
            skipped = ResolutionOutcome(ResolutionStatus.NOT_REQUESTED, query.raw_product_text)
            return lookup(store_outcome, skipped, snapshot)

        store = store_outcome.entity
        items = snapshot.list_items_by_store(store.id) if store is not None else snapshot.items
        product_outcome = resolve_product(query.raw_product_text, items,
                                          strip_punctuation=self.settings.strip_punctuation)
        return lookup(store_outcome, product_outcome, snapshot)

    def _store_summary(self, query: Query, snapshot: CatalogSnapshot) -> StockResult:
        return summarize_store(self._resolve_store(query, snapshot), snapshot,
                               limit=self.settings.summary_limit)

    def _low_stock(self, query: Query, snapshot: CatalogSnapshot) -> StockResult:
        store: Optional[Store] = None
        if query.has_location:
            outcome = self._resolve_store(query, snapshot)
            if outcome.status is not ResolutionStatus.RESOLVED_SINGLE:
                # Not found or ambiguous: answer the same way a summary would
                return summarize_store(outcome, snapshot, limit=self.settings.summary_limit)
            store = outcome.entity
        return low_stock_report(snapshot, limit=self.settings.summary_limit, store=store)
