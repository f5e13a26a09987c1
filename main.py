#!/usr/bin/env python3
"""
SmartStock - Dialogflow stock-query webhook
"""

import logging
import sys

from smartstock.catalog_client import CatalogClient, StaticCatalogClient
from smartstock.config import load_settings
from smartstock.errors import SmartStockError
from smartstock.intent_router import IntentRouter
from smartstock.logging_config import setup_logging
from smartstock.webhook import make_server

logger = logging.getLogger(__name__)


def build_catalog(settings):
    """REST catalog when a URL is configured, else a JSON file or the sample data."""
    if settings.catalog_url:
        return CatalogClient(
            settings.catalog_url,
            api_key=settings.api_key,
            timeout=settings.catalog_timeout,
            max_retries=settings.catalog_max_retries,
        )
    if settings.catalog_path:
        return StaticCatalogClient.from_file(settings.catalog_path)
    logger.warning("No catalog_url or catalog_path configured, serving sample data")
    return StaticCatalogClient()


def main():
    try:
        settings = load_settings(sys.argv[1] if len(sys.argv) > 1 else None)
    except SmartStockError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)

    try:
        catalog = build_catalog(settings)
    except SmartStockError as e:
        logger.error(f"Cannot load catalog: {e}")
        return 1

    router = IntentRouter(catalog, settings)
    server = make_server(router, port=settings.webhook_port)

    print("=" * 50)
    print("  SmartStock Webhook")
    print("=" * 50)
    print(f"Listening on http://localhost:{settings.webhook_port}/webhook")
    print(f"Ambiguity policy: {settings.ambiguity_policy}")
    print("=" * 50)
    print("Press Ctrl+C to stop")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nStopping...")
    finally:
        server.server_close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
