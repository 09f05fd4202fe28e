"""MCP Manager - Main entry point."""

import argparse
import logging
import os
import sys
from pathlib import Path

from aiohttp import web

from api.server import create_app
from core.persistence import FileStorageAdapter
from core.record_store import RecordStore
from core.storage_manager import StorageManager
from utils.constants import APP_NAME, APP_VERSION, DEFAULT_PORT, PASSWORD_ENV_VAR
from utils.logger import setup_logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mcp-manager", description=f"{APP_NAME} API server")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to listen on")
    parser.add_argument("--storage-dir", type=Path, default=None, help="Directory holding the JSON collections")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser.parse_args(argv)


def build_store(storage_dir=None) -> RecordStore:
    """
    Wire adapter, storage manager and record store together and load data.

    The encryption password comes from the environment and is only applied
    when the stored settings enable encryption.
    """
    logger = logging.getLogger(__name__)

    adapter = FileStorageAdapter(storage_dir)
    if not adapter.is_writable():
        logger.warning(f"Storage directory is not writable: {adapter.storage_dir}")
    storage = StorageManager(adapter)

    settings = storage.get_settings()
    password = os.environ.get(PASSWORD_ENV_VAR)
    if settings.encryption_enabled and password:
        storage.set_encryption_password(password)
    elif settings.encryption_enabled:
        logger.warning(f"Encryption enabled but {PASSWORD_ENV_VAR} is not set; secrets are stored as-is")

    store = RecordStore(storage)
    store.load_data()
    if store.error:
        logger.error(f"Initial load failed: {store.error}")
    return store


def main(argv=None):
    """Main entry point for MCP Manager."""
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    logger.info(f"{APP_NAME} {APP_VERSION} starting...")

    try:
        store = build_store(args.storage_dir)
        logger.info(f"Loaded {len(store.mcps)} MCPs, {len(store.profiles)} profiles")

        app = create_app(store.storage)
        logger.info(f"Serving API on port {args.port}")
        web.run_app(app, port=args.port, print=None)

        logger.info("Application closed normally")

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        sys.exit(0)

    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
