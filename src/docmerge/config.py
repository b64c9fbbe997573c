"""
Configuration: default.yaml 로드.

설정 키:
- render.section_properties: 기본 레이아웃 옵션 (예: start_page_number)
- logging.level: CLI 로그 레벨
- logging.run_logs_dir: run log 저장 디렉터리 (null이면 저장 안 함)
"""

import copy
from pathlib import Path
from typing import Any

import yaml

from docmerge.domain.errors import DocMergeError, ErrorCodes

DEFAULT_CONFIG: dict[str, Any] = {
    "render": {
        "section_properties": {},
    },
    "logging": {
        "level": "INFO",
        "run_logs_dir": None,
    },
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def default_config_path() -> Path:
    """프로젝트 루트의 default.yaml."""
    return Path(__file__).parent.parent.parent / "default.yaml"


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    설정 파일 로드.

    파일이 없으면 기본값 반환. 파일 내용은 기본값 위에 deep merge.

    Raises:
        DocMergeError: CONFIG_INVALID (mapping이 아닌 문서)
    """
    if config_path is None:
        config_path = default_config_path()

    if not config_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DocMergeError(
            ErrorCodes.CONFIG_INVALID,
            path=str(config_path),
            type=type(data).__name__,
        )

    return _deep_merge(DEFAULT_CONFIG, data)


def resolve_config(config: dict[str, Any] | None) -> dict[str, Any]:
    """None → 기본값, dict → 기본값 위에 merge."""
    if config is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    return _deep_merge(DEFAULT_CONFIG, config)
