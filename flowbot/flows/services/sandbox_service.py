"""
Service: CodeSandboxService

Runs one code node's script with least privilege and a hard wall-clock budget.

Design:
  - Every call starts a fresh process (``spawn`` by default) that shares
    nothing with the web process but the pipe it reports on.
  - The child signals READY once imported; only then does the node's
    timeout start, so interpreter start-up never eats the script's budget.
    Start-up itself is bounded by SANDBOX_STARTUP_TIMEOUT_SECONDS.
  - The process is terminated in ``finally`` whatever happens.
  - Failures of any kind come back as SandboxResult(success=False); nothing
    raised here reaches the engine.
"""

# Python Packages
import multiprocessing
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import structlog

# Runtime
from .. import sandbox

# Graph
from .graph import Node

# Config
from ..config import flow_config

# Constants
from ...base import constants

logger = structlog.get_logger(__name__)





@dataclass
class SandboxResult:
    success: bool
    result: Any = None
    error: Optional[str] = None
    variables: Dict[str, Any] = field(default_factory = dict)



class CodeSandboxService:
    """
    Executes code nodes in isolated, time-bounded child processes.
    """

    def __init__(
        self,
        start_method: str = None,
        startup_timeout: float = None,
        http_timeout: float = None
    ):
        self.start_method = start_method or constants.SANDBOX_START_METHOD
        self.startup_timeout = startup_timeout or constants.SANDBOX_STARTUP_TIMEOUT_SECONDS
        self.http_timeout = http_timeout or constants.SANDBOX_HTTP_TIMEOUT_SECONDS


    def execute(self, node: Node, variables: Dict[str, Any]) -> SandboxResult:
        """
        Run the script of a code node against a copy of *variables*.

        Args:
            node:      Code node; data.code is the source, data.timeout the
                       budget in milliseconds (default 5000).
            variables: Current session variables. Not modified.

        Returns:
            SandboxResult. On success ``variables`` holds the script's full
            variable mapping, ready to be merged by the caller.
        """

        code = node.data.get("code") or ""
        if not str(code).strip():
            return SandboxResult(success = False, error = "No code provided")

        timeout_ms = self.get_timeout_ms(node)
        context = multiprocessing.get_context(self.start_method)
        reader, writer = context.Pipe(duplex = False)
        process = context.Process(
            target = sandbox.run_script,
            args = (str(code), dict(variables or {}), self.http_timeout, writer),
            daemon = True
        )

        try:
            process.start()
            writer.close()

            if not reader.poll(self.startup_timeout) or reader.recv()[0] != sandbox.READY:
                return SandboxResult(success = False, error = "Code sandbox failed to start")

            if not reader.poll(timeout_ms / 1000.0):
                logger.warning(
                    "Code node timed out",
                    node_id = node.id,
                    timeout_ms = timeout_ms
                )
                return SandboxResult(
                    success = False,
                    error = f"Code execution timed out after {timeout_ms} ms"
                )

            _, payload = reader.recv()

        except EOFError:
            return SandboxResult(success = False, error = "Code execution failed")

        except Exception as error:
            logger.exception("Code sandbox error", node_id = node.id)
            return SandboxResult(success = False, error = str(error) or "Code execution failed")

        finally:
            reader.close()
            writer.close()
            self._teardown(process)

        return SandboxResult(
            success = payload.get("success", False),
            result = payload.get("result"),
            error = payload.get("error"),
            variables = payload.get("variables") or {}
        )


    @staticmethod
    def get_timeout_ms(node: Node) -> int:
        """ Node's timeout in ms; missing, zero or garbage means the default... """

        try:
            timeout_ms = int(float(node.data.get("timeout") or 0))
        except (TypeError, ValueError):
            timeout_ms = 0

        return timeout_ms if timeout_ms > 0 else flow_config.CODE_NODE_DEFAULT_TIMEOUT_MS


    @staticmethod
    def _teardown(process):
        if process.pid is None:
            return

        if process.is_alive():
            process.terminate()
        process.join(1)

        if process.is_alive():
            process.kill()
            process.join()
