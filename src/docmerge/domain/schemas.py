"""
Domain Schemas: 실행 로그 데이터 구조.

run log = 렌더 호출 1회의 결과 및 메타데이터 (JSON 저장).
"""

from dataclasses import dataclass, field
from typing import Any

# =============================================================================
# Logging Schemas
# =============================================================================


@dataclass
class WarningLog:
    """
    경고 로그.

    경고 필수 컨텍스트: level, code, action_id, part,
                       original_value, resolved_value, message
    """
    level: str = "warning"
    code: str = ""
    action_id: str = ""
    part: str = ""
    original_value: str | None = None
    resolved_value: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "action_id": self.action_id,
            "part": self.part,
            "original_value": self.original_value,
            "resolved_value": self.resolved_value,
            "message": self.message,
        }


@dataclass
class PartLog:
    """파트 하나에 대해 실행된 processor 기록."""
    part: str
    context_index: int
    processors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "part": self.part,
            "context_index": self.context_index,
            "processors": list(self.processors),
        }


@dataclass
class RunLog:
    """
    실행 로그.

    렌더 호출 단위 실행 결과 및 메타데이터.
    """
    run_id: str
    template: str
    started_at: str  # ISO 8601
    finished_at: str | None = None
    result: str = "pending"  # pending, success, failed
    context_count: int = 0

    # Events
    parts: list[PartLog] = field(default_factory=list)
    warnings: list[WarningLog] = field(default_factory=list)

    # Output
    output_hash: str | None = None
    output_size: int | None = None

    # Error (if failed)
    error_code: str | None = None
    error_context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "template": self.template,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "context_count": self.context_count,
            "parts": [p.to_dict() for p in self.parts],
            "warnings": [w.to_dict() for w in self.warnings],
            "output_hash": self.output_hash,
            "output_size": self.output_size,
            "error_code": self.error_code,
            "error_context": self.error_context,
        }
