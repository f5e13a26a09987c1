# Exceptions for the SmartStock query engine
# Only catalog and configuration failures are raised; matching misses are outcomes, not errors


class SmartStockError(Exception):
    """Base class for SmartStock errors"""


class CatalogUnavailableError(SmartStockError):
    """Store/inventory data could not be fetched"""


class ConfigError(SmartStockError):
    """Invalid value in config.json"""
