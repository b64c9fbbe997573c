"""
Rendering Environment: 컨텍스트 하나당 하나.

포함:
- template: 렌더 중인 Template
- context: 검증된 데이터 컨텍스트 (중첩 mapping)
- section_properties: 레이아웃 옵션 (processor가 교체 가능)
"""

import datetime as dt
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from docmerge.domain.errors import DocMergeError, ErrorCodes

if TYPE_CHECKING:
    from docmerge.render.pipeline import Template

SCALAR_TYPES = (str, int, float, bool, Decimal, dt.date, dt.datetime, dt.time)


@dataclass
class Environment:
    """processor에 전달되는 렌더 환경."""
    template: "Template | None"
    context: dict[str, Any]
    section_properties: dict[str, Any] = field(default_factory=dict)

    @property
    def current_entry(self) -> str | None:
        """현재 처리 중인 파트 이름 (Template 없이 만든 환경이면 None)."""
        document = getattr(self.template, "document", None)
        return getattr(document, "current_entry", None)


def normalize_value(value: Any, path: str = "") -> Any:
    """
    컨텍스트 값 검증/정규화.

    허용: str, 숫자, bool, None, 날짜/시간, list/tuple, mapping(문자열 키)

    Raises:
        DocMergeError: INVALID_CONTEXT
    """
    if value is None or isinstance(value, SCALAR_TYPES):
        return value

    if isinstance(value, Mapping):
        normalized = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise DocMergeError(
                    ErrorCodes.INVALID_CONTEXT,
                    path=path or "<root>",
                    reason=f"non-string key {key!r}",
                )
            normalized[key] = normalize_value(item, f"{path}.{key}" if path else key)
        return normalized

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [normalize_value(item, f"{path}[{i}]") for i, item in enumerate(value)]

    raise DocMergeError(
        ErrorCodes.INVALID_CONTEXT,
        path=path or "<root>",
        reason=f"unsupported type {type(value).__name__}",
    )


def normalize_contexts(contexts: Any) -> list[dict[str, Any]]:
    """
    단일 mapping 또는 mapping 시퀀스 → 검증된 컨텍스트 목록.

    Raises:
        DocMergeError: EMPTY_CONTEXTS, INVALID_CONTEXT
    """
    if isinstance(contexts, Mapping):
        contexts = [contexts]
    elif not isinstance(contexts, Sequence) or isinstance(contexts, (str, bytes, bytearray)):
        raise DocMergeError(
            ErrorCodes.INVALID_CONTEXT,
            path="<root>",
            reason=f"expected mapping or sequence of mappings, got {type(contexts).__name__}",
        )

    if len(contexts) == 0:
        raise DocMergeError(ErrorCodes.EMPTY_CONTEXTS)

    normalized = []
    for index, context in enumerate(contexts):
        if not isinstance(context, Mapping):
            raise DocMergeError(
                ErrorCodes.INVALID_CONTEXT,
                path=f"[{index}]",
                reason=f"context must be a mapping, got {type(context).__name__}",
            )
        normalized.append(normalize_value(context, f"[{index}]"))
    return normalized
