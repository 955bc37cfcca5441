"""
This module provides a factory for creating tracking state store instances based on configuration.
"""
from typing import Dict, Any
from services.store_implementations.store_interface import StoreInterface
from services.store_implementations.json_implementation import JSONStore
from services.store_implementations.sqlite_implementation import SQLiteStore
from utils.showtracker_config import get_config_value, DEFAULT_STORE_PATH

def create_store_service(config: Dict[str, Any]) -> StoreInterface:
    """
    Create and return the appropriate store based on configuration.

    Args:
        config (Dict[str, Any]): Normalized configuration dictionary.

    Returns:
        StoreInterface: An instance of the configured store.

    Raises:
        ValueError: If the store type is not supported.
    """
    store_type = get_config_value(config, "store", "type", fallback="json").strip().lower()
    path = get_config_value(config, "store", "path", fallback=DEFAULT_STORE_PATH)

    if store_type == "json":
        return JSONStore(path)

    elif store_type == "sqlite":
        return SQLiteStore(path)

    else:
        raise ValueError(f"Unsupported store type: {store_type}")
