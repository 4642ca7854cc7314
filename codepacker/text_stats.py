# FILE PATH: codepacker/text_stats.py
# LOCATION: codepacker package
# DESCRIPTION: Token estimation, token tiers and per-file text statistics

"""
Stateless text statistics.

These functions are used directly by the formatter and through the worker
adapter, so there is exactly one implementation of each calculation.
"""

import math
from typing import Dict, Iterable, List, Tuple

import tiktoken

from .patterns import is_text_file

CHARS_PER_TOKEN = 3.5

# (upper bound exclusive, tier name); the last tier has no upper bound
TOKEN_TIERS: Tuple[Tuple[float, str], ...] = (
    (8_000, "comfortable"),
    (32_000, "moderate"),
    (100_000, "large"),
    (math.inf, "oversized"),
)

_encoding = None


def estimate_tokens(text: str, chars_per_token: float = CHARS_PER_TOKEN) -> int:
    """Heuristic token estimate: characters / 3.5, rounded up."""
    return math.ceil(len(text) / chars_per_token)


def token_tier(tokens: int, tiers: Tuple[Tuple[float, str], ...] = TOKEN_TIERS) -> str:
    """Classify a token count into comfortable/moderate/large/oversized."""
    for upper, name in tiers:
        if tokens < upper:
            return name
    return tiers[-1][1]


def count_tokens(text: str) -> int:
    """Count tokens in text using tiktoken."""
    global _encoding
    if _encoding is None:
        _encoding = tiktoken.get_encoding("cl100k_base")
    return len(_encoding.encode(text))


def count_lines(content: str) -> int:
    # an empty string still counts as one line
    return content.count("\n") + 1


def process_file_content(content: str) -> Dict[str, int]:
    return {
        "lines": count_lines(content),
        "tokens": estimate_tokens(content),
        "chars": len(content),
    }


def batch_process(items: Iterable[Dict[str, str]]) -> List[Dict[str, object]]:
    """
    Compute statistics for a batch of {path, name, content} items.

    Items whose name is not a text file are skipped.
    """
    results = []
    for item in items:
        if not is_text_file(item["name"]):
            continue
        stats = process_file_content(item["content"])
        results.append({"path": item["path"], **stats})
    return results
