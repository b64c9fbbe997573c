"""
Render layer: 템플릿 + 컨텍스트 → DOCX.

역할:
- processor registry / 렌더 환경 / 본문 병합 / 결함 보정
"""

from .defaults import DEFAULT_REGISTRY, build_default_registry, register_processor
from .environment import Environment, normalize_contexts
from .pipeline import Template, append_body, move_section_to_last_paragraph
from .registry import ProcessorRegistry
from .repair import repair_reference_ids

__all__ = [
    "Template",
    "Environment",
    "ProcessorRegistry",
    "DEFAULT_REGISTRY",
    "build_default_registry",
    "register_processor",
    "normalize_contexts",
    "move_section_to_last_paragraph",
    "append_body",
    "repair_reference_ids",
]
