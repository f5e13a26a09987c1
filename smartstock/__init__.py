# SmartStock
# Stock-query resolution engine for the minimarket chat assistant

__version__ = '0.1.0'

from .models import (
    Store, InventoryItem, Query, MatchCandidate, MatchKind, ResolutionOutcome,
    ResolutionStatus, StockLevel, ErrorKind, StockResult,
)
from .normalizer import normalize, normalize_text
from .entity_resolver import resolve, resolve_product
from .stock_lookup import classify, lookup, summarize_store, low_stock_report
from .response_composer import ResponseComposer
from .intent_router import IntentRouter
from .catalog_client import CatalogSnapshot, CatalogClient, StaticCatalogClient
from .errors import SmartStockError, CatalogUnavailableError, ConfigError

__all__ = [
    'Store',
    'InventoryItem',
    'Query',
    'MatchCandidate',
    'MatchKind',
    'ResolutionOutcome',
    'ResolutionStatus',
    'StockLevel',
    'ErrorKind',
    'StockResult',
    'normalize',
    'normalize_text',
    'resolve',
    'resolve_product',
    'classify',
    'lookup',
    'summarize_store',
    'low_stock_report',
    'ResponseComposer',
    'IntentRouter',
    'CatalogSnapshot',
    'CatalogClient',
    'StaticCatalogClient',
    'SmartStockError',
    'CatalogUnavailableError',
    'ConfigError',
]
