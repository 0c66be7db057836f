"""
Core token counting logic.

Classes:
- TokenCounter: Protocol ma pipeline can (count_tokens)
- TiktokenCounter: Dem bang tiktoken encoding
- EstimatingTokenCounter: Uoc luong ~4 ky tu = 1 token khi khong co encoder

Chon encoder nam o core.encoders (load_token_counter).
"""

from typing import Any, Protocol, runtime_checkable

# Heuristic pho bien: ~4 ky tu = 1 token
CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """
    Uoc luong so token khi encoder khong kha dung.

    Day la uoc luong, khong chinh xac 100%.

    Args:
        text: Text can uoc luong

    Returns:
        So token uoc luong (0 neu text rong)
    """
    if not text:
        return 0
    return max(1, len(text) // CHARS_PER_TOKEN)


@runtime_checkable
class TokenCounter(Protocol):
    """Dem token trong text. Phai an toan khi goi tu nhieu threads."""

    def count_tokens(self, text: str) -> int: ...


class TiktokenCounter:
    """
    TokenCounter dung tiktoken.Encoding.

    tiktoken.Encoding.encode() thread-safe, co the chia se giua workers.
    """

    def __init__(self, encoding: Any):
        self.encoding = encoding

    @property
    def name(self) -> str:
        return self.encoding.name

    def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        # disallowed_special=() de text chua "<|endoftext|>" khong bi raise
        return len(self.encoding.encode(text, disallowed_special=()))


class EstimatingTokenCounter:
    """TokenCounter fallback khi khong load duoc encoding nao."""

    name = "estimate"

    def count_tokens(self, text: str) -> int:
        return estimate_tokens(text)
