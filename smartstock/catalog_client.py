# Catalog Client - read-only access to the store directory and inventory
# Fetches a snapshot once per request; the engine only ever sees the snapshot

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import requests

from .errors import CatalogUnavailableError
from .models import InventoryItem, Store
from .normalizer import normalize_text

logger = logging.getLogger(__name__)


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError):
        return default


class CatalogSnapshot:
    """Stores and inventory items as fetched for one request"""

    def __init__(self, stores: Iterable[Store], items: Iterable[InventoryItem]):
        self.stores = list(stores)
        self._stores_by_id = {s.id: s for s in self.stores}
        self.items = []
        for item in items:
            if item.store_id not in self._stores_by_id:
                logger.warning("Dropping item %s: unknown store %s", item.id, item.store_id)
                continue
            self.items.append(item)

    def list_stores(self) -> List[Store]:
        return list(self.stores)

    def list_items_by_store(self, store_id: str) -> List[InventoryItem]:
        return [i for i in self.items if i.store_id == store_id]

    def list_items_by_name(self, product_text: str) -> List[InventoryItem]:
        """Items across all stores whose normalized name equals `product_text`."""
        wanted = normalize_text(product_text)
        return [i for i in self.items if normalize_text(i.name) == wanted]

    def store_by_id(self, store_id: str) -> Optional[Store]:
        return self._stores_by_id.get(store_id)

    @classmethod
    def from_records(cls, store_records: Optional[List[Dict]], item_records: List[Dict]) -> 'CatalogSnapshot':
        """
        Build a snapshot from raw documents.
        Accepts both snake_case and the inventory collection's camelCase fields.
        Without store records the store directory is derived from the items.
        """
        stores = []
        seen = set()
        for rec in store_records or []:
            store_id = str(rec.get('id') or rec.get('storeId') or '')
            name = rec.get('display_name') or rec.get('displayName') or rec.get('storeName') or rec.get('name') or ''
            if store_id and store_id not in seen:
                seen.add(store_id)
                stores.append(Store(store_id, str(name)))

        items = []
        for n, rec in enumerate(item_records or []):
            store_id = str(rec.get('store_id') or rec.get('storeId') or '')
            if store_records is None and store_id and store_id not in seen:
                seen.add(store_id)
                stores.append(Store(store_id, str(rec.get('storeName') or store_id)))
            threshold = rec.get('reorder_threshold', rec.get('reorderThreshold', rec.get('reorderPoint')))
            items.append(InventoryItem(
                id=str(rec.get('id') or f"item-{n}"),
                store_id=store_id,
                name=str(rec.get('name') or ''),
                sku=str(rec.get('sku') or ''),
                qty=_to_int(rec.get('qty')),
                reorder_threshold=_to_int(threshold, 5),
                category=str(rec.get('category') or ''),
            ))
        return cls(stores, items)


class CatalogClient:
    """REST client for the store directory and inventory services"""

    def __init__(self, base_url: str, api_key: str = None, timeout: int = 10,
                 max_retries: int = 2):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = 1  # seconds
        self.session = requests.Session()

        if api_key:
            self.session.headers.update({'Authorization': f'Bearer {api_key}'})

        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'SmartStock-Webhook/1.0'
        })

    def _get(self, path: str) -> Any:
        endpoint = f"{self.base_url}{path}"
        last_error = 'unknown'

        for attempt in range(self.max_retries):
            try:
                response = self.session.get(endpoint, timeout=self.timeout)

                if response.status_code == 200:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise CatalogUnavailableError(f"GET {path} returned invalid JSON: {e}") from e

                if response.status_code in (400, 401, 403, 404):
                    # Not something a retry will fix
                    raise CatalogUnavailableError(f"GET {path} returned {response.status_code}")

                last_error = f"status {response.status_code}"
                logger.warning(f"Catalog error {response.status_code}, retry {attempt + 1}/{self.max_retries}")

            except requests.exceptions.Timeout:
                last_error = 'timeout'
                logger.warning(f"Catalog timeout, retry {attempt + 1}/{self.max_retries}")

            except requests.exceptions.ConnectionError:
                last_error = 'connection error'
                logger.warning(f"Catalog connection error, retry {attempt + 1}/{self.max_retries}")

            except requests.exceptions.RequestException as e:
                raise CatalogUnavailableError(f"GET {path} failed: {e}") from e

            if attempt + 1 < self.max_retries:
                time.sleep(self.retry_delay * (attempt + 1))

        raise CatalogUnavailableError(f"GET {path} failed: {last_error}")

    def _records(self, path: str, key: str) -> List[Dict]:
        """GET `path` and return its records, bare or wrapped as {key: [...]}."""
        data = self._get(path)
        records = data.get(key, []) if isinstance(data, dict) else data
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise CatalogUnavailableError(
                f"GET {path} returned unexpected {key} payload: {type(records).__name__}")
        return records

    def list_stores(self) -> List[Dict]:
        return self._records('/api/stores', 'stores')

    def list_items_by_store(self, store_id: str) -> List[Dict]:
        return self._records(f'/api/stores/{store_id}/items', 'items')

    def fetch_snapshot(self) -> CatalogSnapshot:
        """Fetch the store directory and every store's items."""
        stores = self.list_stores()
        items = []
        for rec in stores:
            store_id = rec.get('id') or rec.get('storeId')
            if not store_id:
                continue
            for item in self.list_items_by_store(store_id):
                item.setdefault('storeId', store_id)
                items.append(item)
        snapshot = CatalogSnapshot.from_records(stores, items)
        logger.info(f"Fetched catalog: {len(snapshot.stores)} stores, {len(snapshot.items)} items")
        return snapshot


class StaticCatalogClient:
    """In-memory catalog, for local runs and tests"""

    def __init__(self, snapshot: 'CatalogSnapshot' = None):
        self.snapshot = snapshot if snapshot is not None else sample_snapshot()
        self.fetch_count = 0

    def fetch_snapshot(self) -> CatalogSnapshot:
        self.fetch_count += 1
        return self.snapshot

    @classmethod
    def from_file(cls, path) -> 'StaticCatalogClient':
        """Load {"stores": [...], "items": [...]} from a JSON file."""
        path = Path(path)
        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CatalogUnavailableError(f"Cannot read catalog file {path}: {e}") from e
        if not isinstance(data, dict):
            raise CatalogUnavailableError(f"Catalog file {path} must hold a JSON object")
        return cls(CatalogSnapshot.from_records(data.get('stores'), data.get('items', [])))


def sample_snapshot() -> CatalogSnapshot:
    """Two Nilai branches sharing a long common name prefix."""
    stores = [
        {'id': 'store-acacia', 'storeName': '99 Speedmart Acacia, Nilai'},
        {'id': 'store-desa-jati', 'storeName': '99 Speedmart Desa Jati, Nilai'},
    ]
    items = [
        {'id': 'oil-acacia', 'storeId': 'store-acacia', 'name': 'Oil Packet 1KG', 'sku': 'OP-1KG',
         'category': 'Groceries', 'qty': 3, 'reorderPoint': 5},
        {'id': 'oil-desa-jati', 'storeId': 'store-desa-jati', 'name': 'Oil Packet 1KG', 'sku': 'OP-1KG',
         'category': 'Groceries', 'qty': 24, 'reorderPoint': 5},
        {'id': 'cola-acacia', 'storeId': 'store-acacia', 'name': 'Coca Cola 330ml', 'sku': 'CC-330',
         'category': 'Beverages', 'qty': 50, 'reorderPoint': 10},
        {'id': 'maggi-desa-jati', 'storeId': 'store-desa-jati', 'name': 'Maggi Instant Noodles', 'sku': 'MG-001',
         'category': 'Food', 'qty': 0, 'reorderPoint': 20},
    ]
    return CatalogSnapshot.from_records(stores, items)
