"""
IngestSettings - Typed settings dataclass cho pipeline ingest.

Tat ca settings duoc truy cap qua typed fields thay vi string keys.

Modules:
- IngestSettings: Dataclass chua toan bo settings cua mot lan chay
- from_dict(): Tao IngestSettings tu dict (settings.json)
- to_dict(): Chuyen doi IngestSettings thanh dict de luu xuong file

Su dung:
    settings = load_ingest_settings()
    if settings.count_tokens:
        ...
"""

import typing
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional

from config.output_format import (
    DEFAULT_PRESET,
    DEFAULT_PROLOGUE_MODE,
    Preset,
    PrologueMode,
    parse_preset,
    parse_prologue_mode,
)


# === Default values ===
# Tran kich thuoc file (10 MiB), file lon hon bi skip
MAX_FILE_SIZE = 10 * 1024 * 1024
# So bytes dau file dung de phat hien binary
BINARY_PREFIX_SIZE = 1024
# Suc chua cua channel giua worker pool va writer
CHANNEL_CAPACITY = 32
# So task toi da da dispatch nhung chua duoc ghi ra sink
REORDER_WINDOW = 256
DEFAULT_ENCODING = "o200k_base"


@dataclass
class IngestSettings:
    """
    Typed settings cho mot lan tao digest.

    Moi field tuong ung voi mot key trong settings.json.
    Default values duoc su dung khi settings.json chua co key tuong ung.
    """

    # --- Output ---
    preset: str = DEFAULT_PRESET.value
    prologue: str = DEFAULT_PROLOGUE_MODE.value

    # --- Tokenization ---
    count_tokens: bool = True
    encoding_name: str = DEFAULT_ENCODING

    # --- Pipeline ---
    max_file_size: int = MAX_FILE_SIZE
    channel_capacity: int = CHANNEL_CAPACITY
    # 0 = khong gioi han reorder window
    reorder_window: int = REORDER_WINDOW
    # 0 = tu dong theo so CPU
    max_workers: int = 0

    # --- Discovery ---
    use_gitignore: bool = True
    excluded_patterns: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IngestSettings":
        """
        Tao IngestSettings tu dict, chi lay cac keys trung voi field names.

        Neu value co type khong khop voi field declaration, se bo qua
        va dung default thay the.

        Args:
            data: Dict settings (thuong tu settings.json)

        Returns:
            IngestSettings instance voi values tu dict, fallback ve defaults
        """
        field_types: dict[str, Any] = typing.get_type_hints(cls)

        filtered: dict[str, Any] = {}
        for key, value in data.items():
            if key not in field_types:
                continue

            expected_type = field_types[key]

            # isinstance(True, int) == True, nhung bool khong phai so
            if expected_type is int and isinstance(value, bool):
                continue

            origin = typing.get_origin(expected_type)
            check_type = origin if origin is not None else expected_type

            if isinstance(value, check_type):
                filtered[key] = value

        return cls(**filtered)

    def to_dict(self) -> dict[str, Any]:
        """Chuyen doi IngestSettings thanh dict de luu xuong file."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def with_overrides(self, **overrides: Any) -> "IngestSettings":
        """
        Tao ban sao voi cac gia tri override (bo qua value None).

        Dung cho CLI: flag nao user khong truyen thi giu gia tri tu settings.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def get_preset(self) -> Preset:
        """Parse preset string thanh enum (raise ValueError neu sai)."""
        return parse_preset(self.preset)

    def get_prologue_mode(self) -> PrologueMode:
        """Parse prologue string thanh enum (raise ValueError neu sai)."""
        return parse_prologue_mode(self.prologue)

    def get_reorder_window(self) -> Optional[int]:
        """Reorder window, None neu da tat (<= 0)."""
        return self.reorder_window if self.reorder_window > 0 else None

    def get_max_workers(self) -> Optional[int]:
        """So workers, None de pipeline tu chon."""
        return self.max_workers if self.max_workers > 0 else None
