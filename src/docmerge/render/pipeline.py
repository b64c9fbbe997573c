"""
Render pipeline: DOCX 템플릿 + 컨텍스트(들) → 새 DOCX.

처리 순서:
1. 본문(word/document.xml) 원본 사본 보관 (pristine copy)
2. 첫 번째 컨텍스트: 모든 엔트리에 registry processor 실행
3. 이후 컨텍스트: 원본 사본을 복제해 본문 processor만 실행,
   누적 본문의 섹션 속성을 마지막 단락으로 옮긴 뒤 본문 자식들을 이어 붙임
4. 머리글/바닥글 참조 id 보정
5. 재직렬화

실패 시 부분 결과는 반환하지 않는다 (all-or-nothing, 재시도 없음).
"""

import copy
import logging
import re
from pathlib import Path
from typing import Any

from docx.oxml.ns import qn
from lxml import etree

from docmerge.config import resolve_config
from docmerge.core.archive import ArchiveSource, DocumentModel, read_source
from docmerge.core.logging import (
    complete_run_log,
    create_run_log,
    emit_warning,
    record_part,
    save_run_log,
)
from docmerge.core.storage import atomic_write_bytes
from docmerge.domain.constants import HEADER_FOOTER_PATTERN, PRIMARY_PART
from docmerge.domain.errors import (
    ArchiveReadError,
    DocMergeError,
    ErrorCodes,
    OutputWriteError,
    ProcessorError,
    StructuralPreconditionError,
)
from docmerge.domain.schemas import RunLog
from docmerge.processors.base import Processor
from docmerge.render.defaults import DEFAULT_REGISTRY
from docmerge.render.environment import Environment, normalize_contexts
from docmerge.render.registry import ProcessorRegistry
from docmerge.render.repair import repair_reference_ids

logger = logging.getLogger(__name__)

_HEADER_FOOTER_RE = re.compile(HEADER_FOOTER_PATTERN)


# =============================================================================
# Body Splicing
# =============================================================================


def find_body(word_doc: etree._ElementTree) -> etree._Element:
    """
    w:body 조회.

    Raises:
        StructuralPreconditionError: BODY_NOT_FOUND
    """
    body = next(word_doc.getroot().iter(qn("w:body")), None)
    if body is None:
        raise StructuralPreconditionError(ErrorCodes.BODY_NOT_FOUND, part=PRIMARY_PART)
    return body


def move_section_to_last_paragraph(word_doc: etree._ElementTree) -> None:
    """
    본문 직속 w:sectPr를 새 빈 단락의 w:pPr로 옮겨 본문 끝에 추가.

    섹션 속성은 해당 섹션의 마지막 요소여야 하므로, 뒤에 내용을 붙이기 전에
    단락 속성으로 바꿔 두면 이어지는 내용은 새 섹션으로 시작한다.
    See also http://officeopenxml.com/WPsection.php.

    Raises:
        StructuralPreconditionError: BODY_NOT_FOUND, SECTION_PROPERTIES_NOT_UNIQUE
    """
    body = find_body(word_doc)
    sections = body.findall(qn("w:sectPr"))
    if len(sections) != 1:
        raise StructuralPreconditionError(
            ErrorCodes.SECTION_PROPERTIES_NOT_UNIQUE,
            part=PRIMARY_PART,
            found=len(sections),
        )

    sect_pr = sections[0]
    body.remove(sect_pr)

    paragraph = etree.SubElement(body, qn("w:p"))
    p_pr = etree.SubElement(paragraph, qn("w:pPr"))
    p_pr.append(sect_pr)


def append_body(word_doc: etree._ElementTree, source_doc: etree._ElementTree) -> int:
    """
    source_doc 본문의 모든 자식을 word_doc 본문 끝으로 이동 (원래 순서 유지).

    Returns:
        이동한 노드 수
    """
    body = find_body(word_doc)
    children = list(find_body(source_doc))
    for child in children:
        body.append(child)
    return len(children)


# =============================================================================
# Template
# =============================================================================


class Template:
    """
    DOCX 템플릿.

    Usage:
        template = Template(Path("letter.docx"))
        template.render_to_file(Path("out.docx"), [{"name": "A"}, {"name": "B"}])

    render 호출마다 아카이브를 새로 로드하므로 같은 인스턴스로 여러 번 렌더링해도
    이전 결과가 섞이지 않는다. 인스턴스 하나를 여러 스레드에서 동시에 쓰지 않는다.
    """

    def __init__(
        self,
        source: ArchiveSource,
        registry: ProcessorRegistry | None = None,
        config: dict[str, Any] | None = None,
    ):
        """
        Args:
            source: 템플릿 경로, bytes, 또는 바이너리 스트림
                (경로는 렌더마다 다시 열고, bytes/스트림은 한 번 읽어 보관)
            registry: processor registry (None이면 DEFAULT_REGISTRY)
            config: 설정 dict (load_config 결과 등, None이면 기본값)

        Raises:
            ArchiveReadError: ARCHIVE_NOT_FOUND (경로가 아닌 소스를 읽을 때)
        """
        if isinstance(source, (str, Path)):
            self.path: Path | None = Path(source)
            self._data: bytes | None = None
            self.name = str(self.path)
        else:
            self.path = None
            self.name, self._data = read_source(source)

        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.config = resolve_config(config)

        self.document: DocumentModel | None = None
        self.run_log: RunLog | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def render_to_file(
        self,
        output_path: Path | str,
        context: Any,
        properties: dict[str, Any] | None = None,
    ) -> Path:
        """
        render_to_string 결과를 output_path에 원자적으로 저장.

        Returns:
            저장된 파일 경로

        Raises:
            OutputWriteError: OUTPUT_WRITE_FAILED (content에 렌더 결과 보존)
        """
        content = self.render_to_string(context, properties)
        output_path = Path(output_path)

        try:
            atomic_write_bytes(output_path, content)
        except OSError as e:
            raise OutputWriteError(
                ErrorCodes.OUTPUT_WRITE_FAILED,
                content=content,
                path=str(output_path),
                error=str(e),
            ) from e

        logger.info(f"Wrote {output_path} ({len(content)} bytes)")
        return output_path

    def render_to_string(
        self,
        context: Any,
        properties: dict[str, Any] | None = None,
    ) -> bytes:
        """
        템플릿 렌더링 → .docx 바이트.

        Args:
            context: mapping 하나 또는 mapping 시퀀스 (컨텍스트마다 본문 한 벌)
            properties: 레이아웃 옵션 (config의 render.section_properties 위에 덮어씀)
        """
        return self.render(context, properties)

    def render(
        self,
        contexts: Any,
        properties: dict[str, Any] | None = None,
    ) -> bytes:
        """렌더링 + run log 기록. 실패 시 예외를 그대로 전달."""
        self.run_log = create_run_log(self.name)
        logger.info(f"Rendering {self.name} (run {self.run_log.run_id})")

        try:
            output = self._render(contexts, properties)
        except DocMergeError as e:
            complete_run_log(
                self.run_log,
                success=False,
                error_code=e.code,
                error_context=e.context,
            )
            self._save_run_log()
            raise
        except Exception as e:
            complete_run_log(
                self.run_log,
                success=False,
                error_code=type(e).__name__,
                error_context={"error": str(e)},
            )
            self._save_run_log()
            raise

        complete_run_log(self.run_log, success=True, output=output)
        self._save_run_log()
        logger.info(
            f"Rendered {self.name}: {self.run_log.context_count} context(s), "
            f"{len(self.run_log.warnings)} warning(s)"
        )
        return output

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def _render(self, contexts: Any, properties: dict[str, Any] | None) -> bytes:
        contexts = normalize_contexts(contexts)
        self.run_log.context_count = len(contexts)
        section_properties = self._section_properties(properties)

        self.document = document = self._load()
        if PRIMARY_PART not in document:
            raise ArchiveReadError(
                ErrorCodes.MISSING_PRIMARY_PART,
                path=self.name,
                entry=PRIMARY_PART,
            )

        word_doc = document.get(PRIMARY_PART)
        pristine = copy.deepcopy(word_doc)

        # 첫 번째 컨텍스트: 전체 엔트리
        first, *rest = contexts
        env = Environment(self, first, dict(section_properties))
        self._process_all(env)
        section_properties = env.section_properties

        # 이후 컨텍스트: 본문만
        document.current_entry = PRIMARY_PART
        processors = self.registry.resolve(PRIMARY_PART)
        for index, context in enumerate(rest, start=1):
            working = copy.deepcopy(pristine)
            env = Environment(self, context, dict(section_properties))
            self._run_processors(PRIMARY_PART, working, env, index, processors)
            section_properties = env.section_properties

            move_section_to_last_paragraph(word_doc)
            moved = append_body(word_doc, working)
            logger.debug(f"Appended {moved} body node(s) for context {index}")
        document.current_entry = None

        self._repair(document)
        return document.serialize()

    def _load(self) -> DocumentModel:
        source = self.path if self.path is not None else self._data
        document = DocumentModel.open(source)
        document.source = self.name
        return document

    def _section_properties(self, properties: dict[str, Any] | None) -> dict[str, Any]:
        merged = dict(self.config["render"].get("section_properties") or {})
        merged.update(properties or {})
        return merged

    def _process_all(self, env: Environment) -> None:
        """모든 엔트리에 대해 registry processor 실행 (저장 순서)."""
        document = self.document
        for entry_name in document.names():
            document.current_entry = entry_name
            processors = self.registry.resolve(entry_name)
            if not processors:
                continue
            content = document.get(entry_name)
            self._run_processors(entry_name, content, env, 0, processors)

    def _run_processors(
        self,
        entry_name: str,
        content: Any,
        env: Environment,
        context_index: int,
        processors: list[Processor],
    ) -> None:
        names = []
        for processor in processors:
            name = getattr(processor, "name", type(processor).__name__)
            logger.debug(f"[{context_index}] {entry_name} ← {name}")
            try:
                processor.process(content, env)
            except DocMergeError:
                raise
            except Exception as e:
                raise ProcessorError(
                    ErrorCodes.PROCESSOR_FAILED,
                    part=entry_name,
                    processor=name,
                    context_index=context_index,
                    error=str(e),
                ) from e
            names.append(name)

        record_part(self.run_log, entry_name, context_index, names)

    def _repair(self, document: DocumentModel) -> None:
        """본문 + 머리글/바닥글의 참조 id 보정."""
        parts = [PRIMARY_PART] + [
            name for name in document.names()
            if _HEADER_FOOTER_RE.search(name)
        ]

        for part in parts:
            was_parsed = document.entry(part).parsed
            repairs = repair_reference_ids(document.get(part))

            if not repairs and not was_parsed:
                # 검사만 하고 변경 없으면 원본 바이트 유지
                document.set(part, document.raw(part))
                continue

            for repair in repairs:
                message = f"{repair.tag} used plain id instead of r:id"
                logger.warning(f"{part}: {message} ({repair.ref_id})")
                emit_warning(
                    self.run_log,
                    code=ErrorCodes.REFERENCE_ID_REPAIRED,
                    action_id=f"repair_{repair.tag}_{repair.ref_id}",
                    part=part,
                    message=message,
                    original_value=f'id="{repair.ref_id}"',
                    resolved_value=f'r:id="{repair.ref_id}"',
                )

    def _save_run_log(self) -> None:
        logs_dir = self.config["logging"].get("run_logs_dir")
        if not logs_dir or self.run_log is None:
            return
        try:
            save_run_log(self.run_log, Path(logs_dir))
        except OSError as e:
            logger.warning(f"Failed to save run log {self.run_log.run_id}: {e}")
