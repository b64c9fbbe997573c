"""
Run logging: run log schema, events, warnings

규칙:
- 경고 필수 컨텍스트: level, code, action_id, part,
                    original_value, resolved_value, message
- 렌더 실패 시에도 error_code/error_context 기록
"""

import hashlib
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from docmerge.core.ids import generate_run_id
from docmerge.core.storage import atomic_write_json
from docmerge.domain.constants import RUN_LOG_FILENAME_PATTERN
from docmerge.domain.schemas import PartLog, RunLog, WarningLog

# =============================================================================
# Run Log Management
# =============================================================================


def create_run_log(template: str, context_count: int = 0) -> RunLog:
    """
    새 RunLog 생성.

    Args:
        template: 템플릿 식별자 (파일 경로 또는 "<bytes>")
        context_count: 렌더할 컨텍스트 수

    Returns:
        초기화된 RunLog
    """
    now = datetime.now(UTC).isoformat()

    return RunLog(
        run_id=generate_run_id(),
        template=template,
        started_at=now,
        result="pending",
        context_count=context_count,
    )


def emit_warning(
    run_log: RunLog,
    code: str,
    action_id: str,
    part: str,
    message: str,
    original_value: str | None = None,
    resolved_value: str | None = None,
) -> None:
    """
    경고 이벤트 기록.

    Args:
        run_log: RunLog 인스턴스
        code: 경고 코드
        action_id: 액션 ID (예: repair_headerReference_rId7)
        part: 대상 파트 이름
        message: 경고 메시지
        original_value: 원래 값
        resolved_value: 해결된 값
    """
    warning = WarningLog(
        level="warning",
        code=code,
        action_id=action_id,
        part=part,
        original_value=original_value,
        resolved_value=resolved_value,
        message=message,
    )
    run_log.warnings.append(warning)


def record_part(
    run_log: RunLog,
    part: str,
    context_index: int,
    processors: list[str],
) -> None:
    """파트별 processor 실행 기록 (processor가 없으면 기록하지 않음)."""
    if not processors:
        return
    run_log.parts.append(
        PartLog(part=part, context_index=context_index, processors=processors)
    )


def complete_run_log(
    run_log: RunLog,
    success: bool,
    output: bytes | None = None,
    error_code: str | None = None,
    error_context: dict[str, Any] | None = None,
) -> None:
    """
    RunLog 완료 처리.

    Args:
        run_log: RunLog 인스턴스
        success: 성공 여부
        output: 렌더 결과 바이트 (성공 시 해시/크기 기록)
        error_code: 에러 코드 (실패 시)
        error_context: 에러 컨텍스트 (실패 시)
    """
    now = datetime.now(UTC).isoformat()
    run_log.finished_at = now
    run_log.result = "success" if success else "failed"

    if output is not None:
        run_log.output_hash = f"sha256:{hashlib.sha256(output).hexdigest()}"
        run_log.output_size = len(output)

    if not success:
        run_log.error_code = error_code
        run_log.error_context = error_context


def save_run_log(run_log: RunLog, logs_dir: Path) -> Path:
    """
    RunLog를 파일로 저장.

    Args:
        run_log: RunLog 인스턴스
        logs_dir: 로그 디렉터리 경로

    Returns:
        저장된 파일 경로
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"run_{run_log.run_id}.json"
    atomic_write_json(log_path, run_log.to_dict())
    return log_path


# =============================================================================
# Run Log Reading
# =============================================================================
# 저장된 run log 조회용 공개 API (docmerge.core에서 export)


def load_run_log(log_path: Path) -> dict[str, Any]:
    """
    저장된 RunLog 파일 로드.

    Returns:
        RunLog.to_dict() 형태의 dict
    """
    data: dict[str, Any] = json.loads(log_path.read_text(encoding="utf-8"))
    return data


def list_run_logs(logs_dir: Path) -> list[Path]:
    """
    로그 디렉터리의 모든 run log 파일 목록.

    Returns:
        로그 파일 경로 목록 (최신순)
    """
    if not logs_dir.exists():
        return []

    logs = list(logs_dir.glob(RUN_LOG_FILENAME_PATTERN))
    logs.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return logs
