"""
Core layer: 패키지 입출력 및 실행 기록.

역할:
- Archive Model (zip ↔ 엔트리 맵), 원자적 쓰기, run log
"""

from .archive import DocumentModel, parse_xml, to_xml
from .ids import generate_run_id
from .logging import (
    complete_run_log,
    create_run_log,
    emit_warning,
    list_run_logs,
    load_run_log,
    save_run_log,
)
from .storage import atomic_write_bytes, atomic_write_json

__all__ = [
    # archive
    "DocumentModel",
    "parse_xml",
    "to_xml",
    # ids
    "generate_run_id",
    # storage
    "atomic_write_bytes",
    "atomic_write_json",
    # logging
    "create_run_log",
    "emit_warning",
    "complete_run_log",
    "save_run_log",
    "load_run_log",
    "list_run_logs",
]
