"""
Processor Registry: 파트 이름 패턴 → processor 목록.

규칙:
- 같은 패턴에 다시 등록하면 목록 끝에 추가 (replace_all=True일 때만 초기화)
- 중복 제거 없음: 같은 processor를 두 번 등록하면 두 번 실행
- resolve: 패턴 등록 순서상 처음 일치하는 패턴의 목록만 사용 (병합 없음)
- 일치하는 패턴이 없으면 빈 목록 → 엔트리는 그대로 통과
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from docmerge.processors.base import Processor

Matcher = str | re.Pattern[str] | Callable[[str], bool]


@dataclass
class Registration:
    """패턴 하나와 그 processor 목록."""
    pattern: Matcher
    predicate: Callable[[str], bool]
    processors: list[Processor] = field(default_factory=list)

    def matches(self, entry_name: str) -> bool:
        return bool(self.predicate(entry_name))


def _pattern_key(pattern: Matcher) -> Any:
    """동일 패턴 판별용 키 (문자열/정규식은 값, 함수는 identity)."""
    if isinstance(pattern, str):
        return ("re", pattern, 0)
    if isinstance(pattern, re.Pattern):
        return ("re", pattern.pattern, pattern.flags & ~re.UNICODE)
    return ("fn", id(pattern))


def _compile(pattern: Matcher) -> Callable[[str], bool]:
    if isinstance(pattern, str):
        compiled = re.compile(pattern)
        return lambda name: compiled.search(name) is not None
    if isinstance(pattern, re.Pattern):
        return lambda name: pattern.search(name) is not None
    if callable(pattern):
        return pattern
    raise TypeError(f"Unsupported pattern type: {type(pattern).__name__}")


class ProcessorRegistry:
    """
    파트 이름 패턴별 processor 테이블.

    Usage:
        registry = ProcessorRegistry()
        registry.register(r"word/document.xml", FieldProcessor())
        for processor in registry.resolve("word/document.xml"):
            processor.process(tree, env)
    """

    def __init__(self) -> None:
        self._registrations: list[Registration] = []
        self._index: dict[Any, Registration] = {}

    def register(
        self,
        pattern: Matcher,
        processor: Processor,
        replace_all: bool = False,
    ) -> None:
        """
        패턴에 processor 추가.

        Args:
            pattern: 정규식 문자열, re.Pattern (search, 비고정), 또는 predicate
            processor: process(content, env)를 제공하는 객체
            replace_all: True면 기존 목록을 비우고 등록
        """
        if not callable(getattr(processor, "process", None)):
            raise TypeError(f"Processor must define process(content, env): {processor!r}")

        key = _pattern_key(pattern)
        registration = self._index.get(key)
        if registration is None:
            registration = Registration(pattern=pattern, predicate=_compile(pattern))
            self._registrations.append(registration)
            self._index[key] = registration

        if replace_all:
            registration.processors.clear()
        registration.processors.append(processor)

    def resolve(self, entry_name: str) -> list[Processor]:
        """
        엔트리 이름에 대해 실행할 processor 목록.

        Returns:
            첫 번째로 일치하는 패턴의 processor 목록 사본 (없으면 빈 목록)
        """
        for registration in self._registrations:
            if registration.matches(entry_name):
                return list(registration.processors)
        return []

    def patterns(self) -> list[Matcher]:
        """등록된 패턴 목록 (등록 순서)."""
        return [r.pattern for r in self._registrations]

    def __len__(self) -> int:
        return len(self._registrations)
