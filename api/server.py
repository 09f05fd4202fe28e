"""
HTTP API for MCP Manager.

Exposes the storage manager's collections under /api so a browser front end
(or any other client) can read and replace them.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from aiohttp import web

from core.connection_tester import ConnectionTester
from core.errors import ImportFormatError, NotFoundError, ValidationError
from core.storage_manager import StorageManager
from models.mcp import MCP
from models.profile import Profile
from models.settings import Settings

logger = logging.getLogger(__name__)

STORAGE_KEY = web.AppKey("storage", StorageManager)
TESTER_KEY = web.AppKey("tester", ConnectionTester)

SUCCESS = {"success": True}


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Translate failures into JSON error bodies."""
    try:
        return await handler(request)
    except web.HTTPNotFound:
        if request.path.startswith("/api"):
            return _error("API endpoint not found", 404)
        raise
    except web.HTTPException:
        raise
    except NotFoundError as e:
        return _error(str(e), 404)
    except (ValidationError, ImportFormatError) as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception(f"{request.method} {request.path} failed: {e}")
        return _error(str(e), 500)


async def _read_json(request: web.Request, expected: type) -> Any:
    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON body: {e}") from e
    if not isinstance(body, expected):
        raise ValidationError(f"Expected a JSON {'array' if expected is list else 'object'}")
    return body


def _storage(request: web.Request) -> StorageManager:
    return request.app[STORAGE_KEY]


async def get_mcps(request: web.Request) -> web.Response:
    mcps = await asyncio.to_thread(_storage(request).get_mcps)
    return web.json_response([mcp.to_dict() for mcp in mcps])


async def save_mcps(request: web.Request) -> web.Response:
    records = await _read_json(request, list)
    mcps = [MCP.from_dict(record) for record in records if isinstance(record, dict)]
    await asyncio.to_thread(_storage(request).save_mcps, mcps)
    return web.json_response(SUCCESS)


async def get_profiles(request: web.Request) -> web.Response:
    profiles = await asyncio.to_thread(_storage(request).get_profiles)
    return web.json_response([profile.to_dict() for profile in profiles])


async def save_profiles(request: web.Request) -> web.Response:
    records = await _read_json(request, list)
    profiles = [Profile.from_dict(record) for record in records if isinstance(record, dict)]
    await asyncio.to_thread(_storage(request).save_profiles, profiles)
    return web.json_response(SUCCESS)


async def get_settings(request: web.Request) -> web.Response:
    settings = await asyncio.to_thread(_storage(request).get_settings)
    return web.json_response(settings.to_dict())


async def save_settings(request: web.Request) -> web.Response:
    body = await _read_json(request, dict)
    await asyncio.to_thread(_storage(request).save_settings, Settings.from_dict(body))
    return web.json_response(SUCCESS)


async def get_backups(request: web.Request) -> web.Response:
    backups = await asyncio.to_thread(_storage(request).get_backups)
    return web.json_response([backup.to_dict() for backup in backups])


async def create_backup(request: web.Request) -> web.Response:
    description: Optional[str] = None
    if request.can_read_body:
        body = await _read_json(request, dict)
        description = body.get("description")
    backup = await asyncio.to_thread(_storage(request).create_backup, description)
    return web.json_response(backup.to_dict())


async def restore_backup(request: web.Request) -> web.Response:
    backup_id = request.match_info["backup_id"]
    await asyncio.to_thread(_storage(request).restore_from_backup, backup_id)
    return web.json_response(SUCCESS)


async def clear_storage(request: web.Request) -> web.Response:
    await asyncio.to_thread(_storage(request).clear_all)
    return web.json_response(SUCCESS)


async def storage_info(request: web.Request) -> web.Response:
    info = await asyncio.to_thread(_storage(request).get_storage_info)
    return web.json_response(info)


async def test_connection(request: web.Request) -> web.Response:
    body = await _read_json(request, dict)
    result = await request.app[TESTER_KEY].test_connection(MCP.from_dict(body))
    return web.json_response(result.to_dict())


def create_app(storage: StorageManager, tester: Optional[ConnectionTester] = None) -> web.Application:
    """
    Build the aiohttp application

    Args:
        storage: Storage manager backing every route
        tester: Connection tester; a default one is created when omitted

    Returns:
        Configured web.Application
    """
    app = web.Application(middlewares=[error_middleware])
    app[STORAGE_KEY] = storage
    app[TESTER_KEY] = tester or ConnectionTester()

    app.router.add_get("/api/mcps", get_mcps)
    app.router.add_post("/api/mcps", save_mcps)
    app.router.add_get("/api/profiles", get_profiles)
    app.router.add_post("/api/profiles", save_profiles)
    app.router.add_get("/api/settings", get_settings)
    app.router.add_post("/api/settings", save_settings)
    app.router.add_get("/api/backups", get_backups)
    app.router.add_post("/api/backups", create_backup)
    app.router.add_post("/api/backups/{backup_id}/restore", restore_backup)
    app.router.add_post("/api/storage/clear", clear_storage)
    app.router.add_get("/api/storage/info", storage_info)
    app.router.add_post("/api/test-connection", test_connection)

    logger.debug("API routes registered")
    return app
