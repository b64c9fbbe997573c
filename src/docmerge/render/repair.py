"""
알려진 구조적 결함 보정.

LibreOffice 등 일부 도구가 만든 파일에서 w:headerReference/w:footerReference가
네임스페이스 r:id 대신 일반 id 속성을 가진 경우가 관찰됨 → r:id로 옮긴다.
검증기가 아님: 관찰된 결함만 고친다.
"""

from dataclasses import dataclass

from docx.oxml.ns import qn
from lxml import etree

from docmerge.domain.constants import REFERENCE_TAGS


@dataclass
class ReferenceRepair:
    """보정된 참조 하나."""
    tag: str
    ref_id: str


def repair_reference_ids(tree: etree._ElementTree | etree._Element) -> list[ReferenceRepair]:
    """
    머리글/바닥글 참조의 id → r:id.

    Returns:
        보정 내역 (없으면 빈 목록)
    """
    root = tree.getroot() if isinstance(tree, etree._ElementTree) else tree
    repairs = []

    for tag in REFERENCE_TAGS:
        for ref in root.iter(qn(f"w:{tag}")):
            ref_id = ref.get("id")
            if ref_id is None:
                continue
            del ref.attrib["id"]
            ref.set(qn("r:id"), ref_id)
            repairs.append(ReferenceRepair(tag=tag, ref_id=ref_id))

    return repairs
