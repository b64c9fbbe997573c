"""
Section properties processor: 레이아웃 옵션 → 본문 w:sectPr.

지원 옵션:
- start_page_number: 페이지 번호 시작값 (w:pgNumType/@w:start)

알 수 없는 옵션은 무시한다 (다른 layout processor 몫).
"""

from docx.oxml.ns import qn
from lxml import etree

from docmerge.processors.base import Processor

# CT_SectPr 스키마 순서상 pgNumType 뒤에 와야 하는 요소들
PG_NUM_TYPE_SUCCESSORS = (
    "w:cols",
    "w:formProt",
    "w:vAlign",
    "w:noEndnote",
    "w:titlePg",
    "w:textDirection",
    "w:bidi",
    "w:rtlGutter",
    "w:docGrid",
    "w:printerSettings",
    "w:sectPrChange",
)


class SectionPropertiesProcessor(Processor):
    """본문 섹션 속성 기록."""

    def process(self, content, env) -> None:
        properties = {str(k): v for k, v in (env.section_properties or {}).items()}
        env.section_properties = properties

        if "start_page_number" not in properties:
            return

        root = content.getroot() if isinstance(content, etree._ElementTree) else content
        body = root.find(qn("w:body"))
        if body is None:
            return
        sect_pr = body.find(qn("w:sectPr"))
        if sect_pr is None:
            return

        pg_num_type = self._find_or_add_pg_num_type(sect_pr)
        pg_num_type.set(qn("w:start"), str(properties["start_page_number"]))

    @staticmethod
    def _find_or_add_pg_num_type(sect_pr: etree._Element) -> etree._Element:
        node = sect_pr.find(qn("w:pgNumType"))
        if node is not None:
            return node

        node = etree.Element(qn("w:pgNumType"))
        successors = {qn(tag) for tag in PG_NUM_TYPE_SUCCESSORS}
        for index, child in enumerate(sect_pr):
            if child.tag in successors:
                sect_pr.insert(index, node)
                break
        else:
            sect_pr.append(node)
        return node
