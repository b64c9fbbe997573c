"""Domain layer: errors, constants and schemas."""

from .errors import (
    ArchiveReadError,
    DocMergeError,
    ErrorCodes,
    OutputWriteError,
    ProcessorError,
    StructuralPreconditionError,
)
from .schemas import PartLog, RunLog, WarningLog

__all__ = [
    "DocMergeError",
    "ArchiveReadError",
    "ProcessorError",
    "StructuralPreconditionError",
    "OutputWriteError",
    "ErrorCodes",
    "PartLog",
    "RunLog",
    "WarningLog",
]
