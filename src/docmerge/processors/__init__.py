"""
Processors: 파트별 플러그인.

교체 가능하게 설계: 파이프라인은 Processor 인터페이스만 안다.
"""

from .base import Processor
from .fields import FieldProcessor
from .section_properties import SectionPropertiesProcessor

__all__ = [
    "Processor",
    "FieldProcessor",
    "SectionPropertiesProcessor",
]
