"""
Connection Tester

Liveness probe for MCP servers. Remote servers get an HTTP GET against
their URL; stdio servers get their command validated and resolved on PATH.
"""

import asyncio
import logging
import shutil
import time

import aiohttp

from models.mcp import MCP, RemoteTransport
from models.state import ConnectionTestResult
from utils.constants import CONNECTION_TIMEOUT_SECONDS
from utils.validators import validate_command, validate_url

logger = logging.getLogger(__name__)


class ConnectionTester:
    """Probes MCP servers without ever raising to the caller."""

    def __init__(self, timeout: float = CONNECTION_TIMEOUT_SECONDS):
        """
        Initialize connection tester

        Args:
            timeout: HTTP timeout in seconds for remote servers
        """
        self.timeout = timeout

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    async def test_connection(self, mcp: MCP) -> ConnectionTestResult:
        """
        Test a single MCP server

        Args:
            mcp: MCP record to probe

        Returns:
            ConnectionTestResult with success flag and timing
        """
        start_time = time.monotonic()
        try:
            if isinstance(mcp.transport, RemoteTransport):
                return await self._test_remote(mcp, start_time)
            return self._test_stdio(mcp, start_time)
        except Exception as e:
            logger.error(f"Unexpected error testing '{mcp.name}': {e}")
            return ConnectionTestResult(
                success=False,
                message="Connection test failed",
                duration_ms=self._elapsed_ms(start_time),
                error=str(e)
            )

    async def _test_remote(self, mcp: MCP, start_time: float) -> ConnectionTestResult:
        url = mcp.url or ""
        is_valid, error = validate_url(url)
        if not is_valid:
            return ConnectionTestResult(
                success=False,
                message="Invalid URL",
                duration_ms=self._elapsed_ms(start_time),
                error=error
            )

        transport_name = mcp.transport_type.upper()
        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=mcp.headers) as response:
                    if response.status < 500:
                        logger.info(f"{transport_name} server '{mcp.name}' reachable ({response.status})")
                        return ConnectionTestResult(
                            success=True,
                            message=f"Connected to {transport_name} MCP server",
                            duration_ms=self._elapsed_ms(start_time)
                        )

                    error = f"Server returned status {response.status}"
                    logger.warning(f"'{mcp.name}': {error}")
                    return ConnectionTestResult(
                        success=False,
                        message="Connection failed",
                        duration_ms=self._elapsed_ms(start_time),
                        error=error
                    )

        except asyncio.TimeoutError:
            error = f"Connection timed out after {self.timeout} seconds"
            logger.warning(f"'{mcp.name}': {error}")
            return ConnectionTestResult(
                success=False,
                message="Connection timeout",
                duration_ms=self._elapsed_ms(start_time),
                error=error
            )
        except aiohttp.ClientError as e:
            logger.warning(f"'{mcp.name}': unable to connect: {e}")
            return ConnectionTestResult(
                success=False,
                message="Connection failed",
                duration_ms=self._elapsed_ms(start_time),
                error=f"Unable to connect to MCP server: {e}"
            )

    def _test_stdio(self, mcp: MCP, start_time: float) -> ConnectionTestResult:
        command = mcp.command or ""
        is_valid, error = validate_command(command, mcp.args)
        if not is_valid:
            return ConnectionTestResult(
                success=False,
                message="Invalid command",
                duration_ms=self._elapsed_ms(start_time),
                error=error
            )

        executable = shutil.which(command)
        if executable is None:
            logger.warning(f"Command '{command}' for '{mcp.name}' not found on PATH")
            return ConnectionTestResult(
                success=False,
                message="Command not found",
                duration_ms=self._elapsed_ms(start_time),
                error=f"'{command}' is not installed or not on PATH"
            )

        logger.info(f"stdio server '{mcp.name}' ready ({executable})")
        return ConnectionTestResult(
            success=True,
            message="MCP command is available",
            duration_ms=self._elapsed_ms(start_time)
        )
