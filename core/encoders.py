"""
Encoders - Chon va khoi tao tokenizer cho token counting.

Encoder duoc load MOT LAN truoc khi pipeline chay (load_token_counter)
roi truyen xuong workers nhu mot object binh thuong,
khong dung singleton lazy-init o muc module.

Thu tu thu: encoding duoc yeu cau -> o200k_base -> cl100k_base -> p50k_base -> gpt2.
Neu tat ca that bai (vd: offline, chua co cache BPE), fallback ve uoc luong.
"""

from typing import List

import tiktoken

from core.logging_config import log_info, log_warning
from core.tokenization.counter import (
    EstimatingTokenCounter,
    TiktokenCounter,
    TokenCounter,
)

FALLBACK_ENCODINGS = ["o200k_base", "cl100k_base", "p50k_base", "gpt2"]


def _encodings_to_try(encoding_name: str) -> List[str]:
    names = [encoding_name] if encoding_name else []
    names.extend(name for name in FALLBACK_ENCODINGS if name != encoding_name)
    return names


def load_token_counter(encoding_name: str = "o200k_base") -> TokenCounter:
    """
    Load tokenizer cho pipeline.

    Args:
        encoding_name: Ten tiktoken encoding uu tien

    Returns:
        TiktokenCounter, hoac EstimatingTokenCounter neu khong load duoc encoding nao
    """
    for name in _encodings_to_try(encoding_name):
        try:
            encoding = tiktoken.get_encoding(name)
        except Exception as e:
            # tiktoken raise ValueError (ten sai) hoac loi network khi tai BPE
            log_warning(f"[Encoders] Could not load tiktoken {name}: {e}")
            continue
        log_info(f"[Encoders] Using tiktoken {name}")
        return TiktokenCounter(encoding)

    log_warning("[Encoders] No tiktoken encoding available, estimating ~4 chars/token")
    return EstimatingTokenCounter()
