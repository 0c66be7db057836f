"""
Config Package - Chua cac constants va cau hinh cua gitmelt

Bao gom:
- paths: Duong dan app data, log, settings
- output_format: Preset va prologue mode registry
- ingest_settings: Typed settings cho pipeline
"""

from config.ingest_settings import IngestSettings
from config.output_format import Preset, PrologueMode

__all__ = [
    "IngestSettings",
    "Preset",
    "PrologueMode",
]
