"""
docmerge: DOCX 템플릿 렌더 파이프라인.

Usage:
    from docmerge import Template

    template = Template("letter.docx")
    template.render_to_file("letters.docx", [{"name": "A"}, {"name": "B"}])
"""

from docmerge.config import load_config
from docmerge.domain.errors import (
    ArchiveReadError,
    DocMergeError,
    ErrorCodes,
    OutputWriteError,
    ProcessorError,
    StructuralPreconditionError,
)
from docmerge.processors import FieldProcessor, Processor, SectionPropertiesProcessor
from docmerge.render import (
    DEFAULT_REGISTRY,
    Environment,
    ProcessorRegistry,
    Template,
    build_default_registry,
    register_processor,
)

__version__ = "0.1.0"

__all__ = [
    "Template",
    "Environment",
    "ProcessorRegistry",
    "DEFAULT_REGISTRY",
    "build_default_registry",
    "register_processor",
    "Processor",
    "FieldProcessor",
    "SectionPropertiesProcessor",
    "load_config",
    "DocMergeError",
    "ArchiveReadError",
    "ProcessorError",
    "StructuralPreconditionError",
    "OutputWriteError",
    "ErrorCodes",
]
