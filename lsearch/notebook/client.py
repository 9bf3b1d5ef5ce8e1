"""
Child-process JSON-RPC client for the external notebook tool.

One call spawns the tool server, performs the initialize / initialized
handshake, issues a single tools/call and kills the process. Messages are
newline-delimited JSON on stdin/stdout. A session moves through

    UNINITIALIZED -> INITIALIZING -> READY -> AWAITING_RESPONSE -> DONE
                                                               \\-> FAILED

and any state goes to FAILED once the deadline passes, whatever the
process is printing.
"""

from __future__ import annotations

import json
import shlex
import subprocess
import threading
import time
from enum import Enum
from queue import Empty, Queue
from typing import Any

from lsearch.config import (
    APP_VERSION,
    NOTEBOOK_CLIENT_NAME,
    NOTEBOOK_HANDSHAKE_DELAY,
    NOTEBOOK_PROTOCOL_VERSION,
    NOTEBOOK_QUERY_TOOL,
    NOTEBOOK_SERVER_COMMAND,
    NOTEBOOK_TIMEOUT_SECONDS,
)
from lsearch.notebook.errors import (
    NotebookError,
    NotebookProcessError,
    NotebookRPCError,
    NotebookTimeoutError,
)
from lsearch.observability.logging import get_logger
from lsearch.observability.telemetry import counter, log_event

logger = get_logger(__name__)

INITIALIZE_ID = 1
TOOL_CALL_ID = 2

# Marks end of stdout in the reader queue
_EOF = object()


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    AWAITING_RESPONSE = "awaiting_response"
    DONE = "done"
    FAILED = "failed"


def extract_answer(result: dict[str, Any] | None) -> str:
    """
    Answer text of a notebook_query result.

    structuredContent.answer when present, else the joined content[].text
    items, else "".
    """
    if not isinstance(result, dict):
        return ""
    structured = result.get("structuredContent")
    if isinstance(structured, dict):
        answer = structured.get("answer")
        if isinstance(answer, str) and answer:
            return answer
    content = result.get("content")
    if isinstance(content, list):
        texts = [
            item["text"]
            for item in content
            if isinstance(item, dict) and isinstance(item.get("text"), str)
        ]
        return "\n".join(texts)
    return ""


class RpcSession:
    """A single request over one child process. Not reusable."""

    def __init__(
        self,
        argv: list[str],
        tool_name: str,
        arguments: dict[str, Any],
        timeout: float,
        handshake_delay: float,
        client_version: str = APP_VERSION,
    ):
        self.argv = argv
        self.tool_name = tool_name
        self.arguments = arguments
        self.timeout = timeout
        self.handshake_delay = handshake_delay
        self.client_version = client_version
        self.state = SessionState.UNINITIALIZED
        self._proc: subprocess.Popen[str] | None = None
        self._lines: Queue[Any] = Queue()

    def run(self) -> dict[str, Any]:
        """
        Drive the handshake and return the tools/call `result` object.

        Raises:
            NotebookTimeoutError: Deadline passed
            NotebookRPCError: The tool call answered with an error
            NotebookProcessError: Spawn failed or stdout closed early
        """
        if self.state is not SessionState.UNINITIALIZED:
            raise RuntimeError(f"Session already used (state={self.state.value})")

        deadline = time.monotonic() + self.timeout
        try:
            self._spawn()
            self._send(
                {
                    "jsonrpc": "2.0",
                    "id": INITIALIZE_ID,
                    "method": "initialize",
                    "params": {
                        "protocolVersion": NOTEBOOK_PROTOCOL_VERSION,
                        "capabilities": {},
                        "clientInfo": {
                            "name": NOTEBOOK_CLIENT_NAME,
                            "version": self.client_version,
                        },
                    },
                }
            )
            self.state = SessionState.INITIALIZING

            while True:
                message = self._next_message(deadline)
                result = self._handle(message, deadline)
                if self.state is SessionState.DONE:
                    return result
        except NotebookError:
            self.state = SessionState.FAILED
            raise
        finally:
            self._shutdown()

    def _spawn(self) -> None:
        try:
            self._proc = subprocess.Popen(
                self.argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                bufsize=1,
            )
        except OSError as e:
            raise NotebookProcessError(f"Could not start notebook server: {e}") from e

        reader = threading.Thread(target=self._read_stdout, name="notebook-rpc-reader", daemon=True)
        reader.start()

    def _read_stdout(self) -> None:
        assert self._proc is not None and self._proc.stdout is not None
        try:
            # A final line without newline is still yielded before EOF
            for line in self._proc.stdout:
                self._lines.put(line)
        except (OSError, ValueError):
            pass  # pipe closed by _shutdown
        finally:
            self._lines.put(_EOF)

    def _send(self, message: dict[str, Any]) -> None:
        assert self._proc is not None and self._proc.stdin is not None
        try:
            self._proc.stdin.write(json.dumps(message) + "\n")
            self._proc.stdin.flush()
        except (BrokenPipeError, OSError, ValueError) as e:
            raise NotebookProcessError(f"Notebook server pipe closed: {e}") from e

    def _next_message(self, deadline: float) -> dict[str, Any]:
        """Next JSON object from stdout; non-JSON lines are skipped."""
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise NotebookTimeoutError(self.timeout)
            try:
                item = self._lines.get(timeout=remaining)
            except Empty:
                raise NotebookTimeoutError(self.timeout) from None

            if item is _EOF:
                returncode = self._exit_code()
                raise NotebookProcessError(
                    f"Notebook server closed (code {returncode})", returncode=returncode
                )

            line = item.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Skipping non-JSON line from notebook server")
                continue
            if isinstance(message, dict):
                return message

    def _exit_code(self) -> int | None:
        if self._proc is None:
            return None
        try:
            return self._proc.wait(timeout=1)
        except subprocess.TimeoutExpired:
            return None

    def _handle(self, message: dict[str, Any], deadline: float) -> dict[str, Any]:
        msg_id = message.get("id")

        if msg_id == INITIALIZE_ID and self.state is SessionState.INITIALIZING:
            self.state = SessionState.READY
            self._send({"jsonrpc": "2.0", "method": "notifications/initialized", "params": {}})
            # Give the server a moment to finish its own setup
            time.sleep(max(0.0, min(self.handshake_delay, deadline - time.monotonic())))
            self._send(
                {
                    "jsonrpc": "2.0",
                    "id": TOOL_CALL_ID,
                    "method": "tools/call",
                    "params": {"name": self.tool_name, "arguments": self.arguments},
                }
            )
            self.state = SessionState.AWAITING_RESPONSE

        elif msg_id == TOOL_CALL_ID and self.state is SessionState.AWAITING_RESPONSE:
            error = message.get("error")
            if error:
                if isinstance(error, dict):
                    raise NotebookRPCError(str(error.get("message", "Unknown error")), error.get("code"))
                raise NotebookRPCError(str(error))
            self.state = SessionState.DONE
            result = message.get("result")
            return result if isinstance(result, dict) else {}

        return {}

    def _shutdown(self) -> None:
        proc = self._proc
        if proc is None:
            return
        if proc.poll() is None:
            proc.kill()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            logger.warning("Notebook server did not exit after kill")
        for stream in (proc.stdin, proc.stdout):
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass


class NotebookClient:
    """
    query(notebook_id, question) -> answer text, over a fresh process per call.

    The server command is split with shlex so MCP_SERVER_PATH may carry
    arguments.
    """

    def __init__(
        self,
        server_command: str = NOTEBOOK_SERVER_COMMAND,
        timeout: float = NOTEBOOK_TIMEOUT_SECONDS,
        handshake_delay: float = NOTEBOOK_HANDSHAKE_DELAY,
        tool_name: str = NOTEBOOK_QUERY_TOOL,
    ):
        self.argv = shlex.split(server_command)
        self.timeout = timeout
        self.handshake_delay = handshake_delay
        self.tool_name = tool_name

    def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Run one tools/call and return its raw result object."""
        if not self.argv:
            raise NotebookProcessError("Notebook server command is empty")

        session = RpcSession(self.argv, name, arguments, self.timeout, self.handshake_delay)
        started = time.monotonic()
        try:
            result = session.run()
        except NotebookError as e:
            counter("notebook.call_failures")
            log_event("notebook.call_failed", tool=name, state=session.state.value, error=str(e))
            raise

        counter("notebook.calls")
        logger.info("Notebook tool %s answered in %.2fs", name, time.monotonic() - started)
        return result

    def query_raw(self, notebook_id: str, question: str) -> dict[str, Any]:
        return self.call_tool(self.tool_name, {"notebook_id": notebook_id, "query": question})

    def query(self, notebook_id: str, question: str) -> str:
        return extract_answer(self.query_raw(notebook_id, question))
