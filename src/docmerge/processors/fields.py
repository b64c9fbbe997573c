"""
Field processor: 단락 텍스트의 Jinja2 placeholder 치환.

- placeholder: {{name}}, {{customer.address}}, {% if ... %} 등
- Word는 한 단락의 텍스트를 여러 run(w:r)으로 쪼개 저장하므로
  태그가 걸친 w:t만 첫 w:t로 합친 뒤 렌더링한다 (태그 밖 run의 서식은 그대로)
- 단락의 텍스트: 하이퍼링크, 변경 추적, 콘텐츠 컨트롤(w:sdt), smartTag 등
  중첩 위치 포함. 텍스트 상자처럼 더 안쪽 w:p에 속한 w:t는 그 단락 몫
- 제어 블록({% if %}, {% for %})이 run 경계를 없애거나 복제하면
  해당 단락의 결과는 첫 w:t로 합친다
- 정의되지 않은 이름은 StrictUndefined → ProcessorError
"""

import logging
import re

import jinja2
from docx.oxml.ns import qn
from lxml import etree

from docmerge.domain.errors import ErrorCodes, ProcessorError
from docmerge.processors.base import Processor

logger = logging.getLogger(__name__)

# Jinja2 구문 시작 마커
FIELD_MARKERS = ("{{", "{%")

# 태그 하나 (표현식 / 문장)
TAG_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.DOTALL)

# 렌더링 중 w:t 경계 표시 (유니코드 사설 영역)
RUN_BOUNDARY = "\ue000"

XML_SPACE = qn("xml:space")


def build_jinja_env() -> jinja2.Environment:
    """필드 렌더링용 Jinja2 환경 (autoescape 없음: lxml이 이스케이프 처리)."""
    return jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )


def paragraph_texts(paragraph: etree._Element) -> list[etree._Element]:
    """단락에 속한 w:t 목록 (문서 순서, 안쪽 단락의 w:t 제외)."""
    p_tag = qn("w:p")
    return [
        t for t in paragraph.iter(qn("w:t"))
        if next(t.iterancestors(p_tag), None) is paragraph
    ]


def merge_tag_runs(texts: list[etree._Element]) -> None:
    """
    여러 w:t에 걸친 태그를 태그가 시작되는 w:t로 모은다.

    단락 전체 텍스트는 바뀌지 않고 w:t 사이 경계만 옮겨진다.
    """
    source = "".join(t.text or "" for t in texts)

    for match in TAG_RE.finditer(source):
        start, end = match.span()
        offset = 0
        first = None

        for index, t in enumerate(texts):
            text = t.text or ""
            t_start, t_end = offset, offset + len(text)
            offset = t_end

            if first is None:
                if start < t_end:
                    first = index
                    if end <= t_end:
                        break
                continue

            take = min(end, t_end) - t_start
            texts[first].text = (texts[first].text or "") + text[:take]
            t.text = text[take:]
            if end <= t_end:
                break


class FieldProcessor(Processor):
    """
    본문/머리글/바닥글 단락의 placeholder 치환.

    Usage:
        registry.register(r"word/document.xml", FieldProcessor())
    """

    def __init__(self, jinja_env: jinja2.Environment | None = None):
        self.jinja_env = jinja_env or build_jinja_env()

    def process(self, content, env) -> None:
        root = content.getroot() if isinstance(content, etree._ElementTree) else content
        rendered_count = 0

        for paragraph in root.iter(qn("w:p")):
            texts = paragraph_texts(paragraph)
            if not texts:
                continue

            source = "".join(t.text or "" for t in texts)
            if not any(marker in source for marker in FIELD_MARKERS):
                continue

            self._render_paragraph(texts, source, env)
            rendered_count += 1

        logger.debug(f"Rendered {rendered_count} field paragraph(s) in {env.current_entry}")

    def _render_paragraph(self, texts: list[etree._Element], source: str, env) -> None:
        originals = [t.text or "" for t in texts]
        merge_tag_runs(texts)

        marked = RUN_BOUNDARY.join(t.text or "" for t in texts)
        rendered = self._render(marked, source, env)

        pieces = rendered.split(RUN_BOUNDARY)
        if len(pieces) != len(texts):
            logger.debug(f"Control block spans runs in {env.current_entry}; merging paragraph")
            pieces = [rendered.replace(RUN_BOUNDARY, "")] + [""] * (len(texts) - 1)

        for t, original, piece in zip(texts, originals, pieces):
            t.text = piece
            if piece != original and piece:
                t.set(XML_SPACE, "preserve")

    def _render(self, marked: str, source: str, env) -> str:
        try:
            return self.jinja_env.from_string(marked).render(env.context)
        except jinja2.TemplateError as e:
            raise ProcessorError(
                ErrorCodes.FIELD_RENDER_FAILED,
                part=env.current_entry,
                expression=source,
                error=str(e),
            ) from e
