# FILE PATH: codepacker/worker.py
# LOCATION: codepacker package
# DESCRIPTION: Message-passing adapter that runs text statistics off the event loop

"""
Background text processing.

``handle_message`` maps a {type, data} message to a {type, result} reply
using the shared pure functions; ``TextWorker`` runs it on a
concurrent.futures executor so token estimation and batch statistics do
not block the event loop.

Message types:
- ESTIMATE_TOKENS  {text, charsPerToken?} -> TOKENS_ESTIMATED int
- PROCESS_FILE     {content, fileId}  -> FILE_PROCESSED    {lines, tokens, chars}
- PARSE_GITIGNORE  {content}          -> GITIGNORE_PARSED  [pattern, ...]
- BATCH_PROCESS    {items}            -> BATCH_PROCESSED   [{path, lines, tokens, chars}, ...]
Unknown types and failures produce an ERROR reply.
"""

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from .patterns import parse_gitignore_content
from .text_stats import CHARS_PER_TOKEN, batch_process, estimate_tokens, process_file_content

Message = Dict[str, Any]


def handle_message(message: Message) -> Message:
    message_type = message.get("type")
    data = message.get("data") or {}

    try:
        if message_type == "ESTIMATE_TOKENS":
            chars_per_token = data.get("charsPerToken", CHARS_PER_TOKEN)
            return {
                "type": "TOKENS_ESTIMATED",
                "result": estimate_tokens(data["text"], chars_per_token),
            }
        if message_type == "PROCESS_FILE":
            return {
                "type": "FILE_PROCESSED",
                "result": process_file_content(data["content"]),
                "fileId": data.get("fileId"),
            }
        if message_type == "PARSE_GITIGNORE":
            return {
                "type": "GITIGNORE_PARSED",
                "result": parse_gitignore_content(data.get("content", "")),
            }
        if message_type == "BATCH_PROCESS":
            return {"type": "BATCH_PROCESSED", "result": batch_process(data["items"])}
    except Exception as e:
        logging.error(f"Worker failed on {message_type}: {str(e)}")
        return {"type": "ERROR", "error": str(e)}

    return {"type": "ERROR", "error": f"Unknown message type: {message_type}"}


class TextWorker:
    """Runs ``handle_message`` on an executor; usable as an async context manager."""

    def __init__(self, executor: Optional[Executor] = None, max_workers: int = 2):
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="codepacker-worker"
        )

    async def post(self, message: Message) -> Message:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, handle_message, message)

    async def _request(self, message_type: str, data: Dict[str, Any]) -> Any:
        reply = await self.post({"type": message_type, "data": data})
        if reply["type"] == "ERROR":
            raise RuntimeError(reply["error"])
        return reply["result"]

    async def estimate_tokens(self, text: str, chars_per_token: float = CHARS_PER_TOKEN) -> int:
        return await self._request(
            "ESTIMATE_TOKENS", {"text": text, "charsPerToken": chars_per_token}
        )

    async def batch_process(self, items: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        """Per-file {path, lines, tokens, chars} for the text items of a batch."""
        return await self._request("BATCH_PROCESS", {"items": items})

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    async def __aenter__(self) -> "TextWorker":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()
