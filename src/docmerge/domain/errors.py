"""
Error definitions for the render pipeline.

규칙:
- 조용한 실패 금지 → DocMergeError 계열로 명시적 실패
- 부분 렌더링 결과는 절대 반환하지 않음 (all-or-nothing)
- 재시도 없음: 모든 실패는 호출자에게 즉시 전달
"""

from typing import Any


class DocMergeError(Exception):
    """
    렌더 파이프라인 에러의 기본 클래스.

    code는 기계 판독용 에러 코드(ErrorCodes), context는 원인 추적용 키워드.

    Usage:
        raise DocMergeError("EMPTY_CONTEXTS", template="invoice.docx")
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            **self.context,
        }


class ArchiveReadError(DocMergeError):
    """아카이브를 읽을 수 없거나 필수 엔트리가 없음/파싱 불가."""


class ProcessorError(DocMergeError):
    """플러그인 processor 실행 중 실패 (표현식 오류, 컨텍스트 키 누락 등)."""


class StructuralPreconditionError(DocMergeError):
    """본문(w:body) 또는 단일 섹션 속성(w:sectPr) 전제 조건 위반."""


class OutputWriteError(DocMergeError):
    """
    출력 파일 쓰기 실패.

    렌더링 결과는 content 속성에 남아 있으므로 호출자가 다시 쓸 수 있다.
    """

    def __init__(self, code: str, content: bytes | None = None, **context: Any) -> None:
        self.content = content
        super().__init__(code, **context)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Archive ===
    ARCHIVE_NOT_FOUND = "ARCHIVE_NOT_FOUND"
    ARCHIVE_INVALID = "ARCHIVE_INVALID"
    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    ENTRY_UNPARSABLE = "ENTRY_UNPARSABLE"
    MISSING_PRIMARY_PART = "MISSING_PRIMARY_PART"

    # === Processors ===
    PROCESSOR_FAILED = "PROCESSOR_FAILED"
    FIELD_RENDER_FAILED = "FIELD_RENDER_FAILED"

    # === Structure ===
    BODY_NOT_FOUND = "BODY_NOT_FOUND"
    SECTION_PROPERTIES_NOT_UNIQUE = "SECTION_PROPERTIES_NOT_UNIQUE"

    # === Output ===
    OUTPUT_WRITE_FAILED = "OUTPUT_WRITE_FAILED"

    # === Input / Config ===
    EMPTY_CONTEXTS = "EMPTY_CONTEXTS"
    INVALID_CONTEXT = "INVALID_CONTEXT"
    CONFIG_INVALID = "CONFIG_INVALID"

    # === Warnings (run log only, not raised) ===
    REFERENCE_ID_REPAIRED = "REFERENCE_ID_REPAIRED"
