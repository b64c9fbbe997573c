"""
원자적 파일 쓰기: 렌더 결과(.docx) 및 run log(JSON)

동작 (best-effort):
- 중간 상태 없음: temp → rename
- 가능한 환경에서 내구성 강화: 파일 fsync + 디렉토리 fsync
- fsync 실패 시 경고 남기고 계속 진행
- 실패 시 temp 파일 정리, 기존 파일 보존
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _fsync_dir(dir_path: Path) -> None:
    """os.replace 결과(디렉터리 엔트리)를 디스크에 반영. 미지원 환경은 경고만."""
    try:
        dir_fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except (OSError, AttributeError) as e:
        logger.warning(f"fsync of {dir_path} skipped: {e}")


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """
    원자적 바이너리 쓰기.

    Args:
        path: 저장할 파일 경로 (상위 디렉터리 자동 생성)
        data: 저장할 바이트

    Raises:
        OSError: 디렉터리 생성/쓰기/rename 실패
    """
    dir_path = path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=dir_path,
            suffix=".tmp",
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            f.write(data)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning(f"fsync of {path} skipped: {e}")

        os.replace(temp_path, path)
        _fsync_dir(dir_path)

    except Exception:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """
    원자적 JSON 쓰기 (indent=2, UTF-8, ensure_ascii=False).

    Args:
        path: 저장할 파일 경로
        data: JSON 직렬화할 데이터
    """
    payload = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    atomic_write_bytes(path, payload.encode("utf-8"))
