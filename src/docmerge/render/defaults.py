"""
기본 processor 등록.

- word/document.xml: 필드 치환 → 섹션 속성
- word/header*.xml, word/footer*.xml: 필드 치환

DEFAULT_REGISTRY는 프로세스 전역 인스턴스. 시작 시 등록만 하고 렌더 중에는 읽기만 한다.
"""

from docmerge.domain.constants import HEADER_FOOTER_PATTERN, PRIMARY_PART_PATTERN
from docmerge.processors import FieldProcessor, SectionPropertiesProcessor
from docmerge.processors.base import Processor
from docmerge.render.registry import Matcher, ProcessorRegistry


def build_default_registry() -> ProcessorRegistry:
    """표준 processor가 등록된 새 registry."""
    registry = ProcessorRegistry()
    registry.register(PRIMARY_PART_PATTERN, FieldProcessor())
    registry.register(PRIMARY_PART_PATTERN, SectionPropertiesProcessor())
    registry.register(HEADER_FOOTER_PATTERN, FieldProcessor())
    return registry


DEFAULT_REGISTRY = build_default_registry()


def register_processor(
    pattern: Matcher,
    processor: Processor,
    replace_all: bool = False,
) -> None:
    """DEFAULT_REGISTRY에 processor 등록."""
    DEFAULT_REGISTRY.register(pattern, processor, replace_all=replace_all)
