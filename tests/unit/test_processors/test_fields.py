"""
test_fields.py - FieldProcessor 테스트

테스트 대상:
- run으로 쪼개진 placeholder 치환
- 하이퍼링크/삽입/콘텐츠 컨트롤 안의 텍스트 포함
- 태그 밖 run 서식 유지, 제어 블록이 run에 걸친 경우
- 공백 보존 (xml:space="preserve")
- 정의되지 않은 이름 → ProcessorError
"""

import pytest
from docx.oxml.ns import qn
from helpers import document_xml, paragraph
from lxml import etree

from docmerge.domain.errors import ErrorCodes, ProcessorError
from docmerge.processors import FieldProcessor
from docmerge.render.environment import Environment


def _tree(body: str) -> etree._ElementTree:
    return etree.fromstring(document_xml(body).encode("utf-8")).getroottree()


def _texts(tree: etree._ElementTree) -> list[str]:
    return [t.text or "" for t in tree.getroot().iter(qn("w:t"))]


def _runs(tree: etree._ElementTree) -> list[tuple[bool, str]]:
    """(굵게 여부, 텍스트) per run."""
    return [
        (r.find(f"{qn('w:rPr')}/{qn('w:b')}") is not None, r.findtext(qn("w:t")) or "")
        for r in tree.getroot().iter(qn("w:r"))
    ]


def _env(**context) -> Environment:
    return Environment(template=None, context=context)


class TestFieldProcessor:
    """FieldProcessor.process 테스트."""

    def test_single_run(self):
        tree = _tree(paragraph("Hello {{name}}"))

        FieldProcessor().process(tree, _env(name="World"))

        assert _texts(tree) == ["Hello World"]

    def test_placeholder_split_across_runs(self):
        """Word가 {{ name }}을 여러 run으로 쪼갠 경우: 태그만 첫 run으로 합침."""
        tree = _tree(
            "<w:p>"
            "<w:r><w:t>Dear {{</w:t></w:r>"
            "<w:r><w:rPr><w:b/></w:rPr><w:t>name</w:t></w:r>"
            "<w:r><w:t>}},</w:t></w:r>"
            "</w:p>"
        )

        FieldProcessor().process(tree, _env(name="Alice"))

        assert _texts(tree) == ["Dear Alice", "", ","]

    def test_formatting_outside_tags_kept(self):
        """태그가 없는 굵은 run은 그대로, 값은 placeholder run 서식으로."""
        tree = _tree(
            "<w:p>"
            "<w:r><w:rPr><w:b/></w:rPr><w:t>Important:</w:t></w:r>"
            '<w:r><w:t xml:space="preserve"> {{name}}</w:t></w:r>'
            "</w:p>"
        )

        FieldProcessor().process(tree, _env(name="Alice"))

        assert _runs(tree) == [(True, "Important:"), (False, " Alice")]

    def test_content_control_text(self):
        """w:sdt 안의 run도 단락 텍스트에 포함."""
        tree = _tree(
            "<w:p>"
            "<w:r><w:t>Name: </w:t></w:r>"
            "<w:sdt><w:sdtContent><w:r><w:t>{{name}}</w:t></w:r></w:sdtContent></w:sdt>"
            "</w:p>"
        )

        FieldProcessor().process(tree, _env(name="Alice"))

        assert _texts(tree) == ["Name: ", "Alice"]

    def test_smart_tag_and_simple_field_text(self):
        tree = _tree(
            "<w:p>"
            "<w:smartTag><w:r><w:t>{{a}}</w:t></w:r></w:smartTag>"
            '<w:fldSimple w:instr="PAGE"><w:r><w:t>{{b}}</w:t></w:r></w:fldSimple>'
            "</w:p>"
        )

        FieldProcessor().process(tree, _env(a="1", b="2"))

        assert _texts(tree) == ["1", "2"]

    def test_nested_paragraph_rendered_on_its_own(self):
        """텍스트 상자 안 단락의 w:t는 바깥 단락 텍스트에 섞이지 않음."""
        tree = _tree(
            "<w:p>"
            "<w:r><w:t>{{outer}}</w:t></w:r>"
            "<w:r><w:pict><w:txbxContent>"
            "<w:p><w:r><w:t>{{inner}}</w:t></w:r></w:p>"
            "</w:txbxContent></w:pict></w:r>"
            "</w:p>"
        )

        FieldProcessor().process(tree, _env(outer="O", inner="I"))

        assert _texts(tree) == ["O", "I"]

    def test_control_block_across_runs_keeps_runs(self):
        """조건이 참이면 run 경계 유지 → 굵은 run 서식 유지."""
        tree = _tree(
            "<w:p>"
            "<w:r><w:t>{% if vip %}</w:t></w:r>"
            "<w:r><w:rPr><w:b/></w:rPr><w:t>VIP</w:t></w:r>"
            "<w:r><w:t>{% endif %}</w:t></w:r>"
            "</w:p>"
        )

        FieldProcessor().process(tree, _env(vip=True))

        assert _runs(tree) == [(False, ""), (True, "VIP"), (False, "")]

    def test_control_block_removing_runs_merges_paragraph(self):
        """경계가 사라지면 결과를 첫 w:t에 합침."""
        tree = _tree(
            "<w:p>"
            "<w:r><w:t>{% if vip %}</w:t></w:r>"
            "<w:r><w:t>VIP</w:t></w:r>"
            "<w:r><w:t>{% endif %}{{name}}</w:t></w:r>"
            "</w:p>"
        )

        FieldProcessor().process(tree, _env(vip=False, name="Kim"))

        assert _texts(tree) == ["Kim", "", ""]

    def test_preserves_space(self):
        tree = _tree(paragraph("{{a}} and {{b}} "))

        FieldProcessor().process(tree, _env(a="x", b="y"))

        t = next(tree.getroot().iter(qn("w:t")))
        assert t.text == "x and y "
        assert t.get(qn("xml:space")) == "preserve"

    def test_hyperlink_and_insert_runs(self):
        tree = _tree(
            "<w:p>"
            '<w:hyperlink r:id="rId9"><w:r><w:t>{{url</w:t></w:r></w:hyperlink>'
            "<w:ins><w:r><w:t>}}</w:t></w:r></w:ins>"
            "</w:p>"
        )

        FieldProcessor().process(tree, _env(url="example.com"))

        assert _texts(tree) == ["example.com", ""]

    def test_nested_context_and_filters(self):
        tree = _tree(paragraph("{{ customer.name | upper }} ({{ items | length }})"))

        FieldProcessor().process(tree, _env(customer={"name": "acme"}, items=[1, 2, 3]))

        assert _texts(tree) == ["ACME (3)"]

    def test_control_statement_in_paragraph(self):
        tree = _tree(paragraph("{% if vip %}VIP {% endif %}{{name}}"))

        FieldProcessor().process(tree, _env(vip=True, name="Kim"))

        assert _texts(tree) == ["VIP Kim"]

    def test_special_characters_escaped_by_serializer(self):
        tree = _tree(paragraph("{{company}}"))

        FieldProcessor().process(tree, _env(company="A & B <C>"))

        assert _texts(tree) == ["A & B <C>"]
        assert b"A &amp; B &lt;C&gt;" in etree.tostring(tree)

    def test_paragraph_without_fields_untouched(self):
        tree = _tree(paragraph("Plain text"))
        before = etree.tostring(tree)

        FieldProcessor().process(tree, _env())

        assert etree.tostring(tree) == before

    def test_undefined_name_raises(self):
        tree = _tree(paragraph("Hello {{missing}}"))

        with pytest.raises(ProcessorError) as exc_info:
            FieldProcessor().process(tree, _env(name="x"))

        assert exc_info.value.code == ErrorCodes.FIELD_RENDER_FAILED
        assert exc_info.value.context["expression"] == "Hello {{missing}}"

    def test_syntax_error_raises(self):
        tree = _tree(paragraph("Hello {{name"))

        with pytest.raises(ProcessorError):
            FieldProcessor().process(tree, _env(name="x"))

    def test_accepts_element(self):
        root = _tree(paragraph("{{x}}")).getroot()

        FieldProcessor().process(root, _env(x="1"))

        assert [t.text for t in root.iter(qn("w:t"))] == ["1"]
