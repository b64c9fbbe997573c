"""
Pytest fixtures for the render pipeline tests.

테스트 구성:
- 정밀 XML 검증용: zipfile로 직접 만든 최소 .docx (helpers.py)
- 실사용 검증용: python-docx Document()로 만든 .docx
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from docx import Document
from helpers import SECT_PR, build_docx_bytes, default_entries, paragraph

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def make_docx(tmp_path: Path) -> Callable[..., Path]:
    """
    .docx 파일 생성 함수.

    Usage:
        path = make_docx(paragraph("Hello {{name}}") + SECT_PR)
        path = make_docx(entries={...})
    """
    counter = {"n": 0}

    def _make(
        body: str | None = None,
        header_body: str | None = None,
        entries: dict[str, str | bytes] | None = None,
        name: str | None = None,
    ) -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"template_{counter['n']}.docx")
        if entries is None:
            entries = default_entries(body or (paragraph("Hello") + SECT_PR), header_body)
        path.write_bytes(build_docx_bytes(entries))
        return path

    return _make


@pytest.fixture
def hello_template(make_docx) -> Path:
    """본문: [Hello {{name}}, sectPr]."""
    return make_docx(paragraph("Hello {{name}}") + SECT_PR)


@pytest.fixture
def word_template(tmp_path: Path) -> Path:
    """
    python-docx로 만든 템플릿.

    placeholder: {{name}}, {{city}} (본문), {{company}} (머리글)
    """
    template_path = tmp_path / "letter.docx"

    doc = Document()
    doc.add_heading("Invitation", 1)
    doc.add_paragraph("Dear {{name}},")
    doc.add_paragraph("See you in {{city}}.")
    doc.sections[0].header.paragraphs[0].text = "{{company}}"
    doc.save(template_path)

    return template_path


@pytest.fixture
def sample_contexts() -> list[dict]:
    """다중 컨텍스트 렌더링용 데이터."""
    return [
        {"name": "Alice", "city": "Seoul", "company": "ACME"},
        {"name": "Bob", "city": "Busan", "company": "ACME"},
        {"name": "홍길동", "city": "대전", "company": "ACME"},
    ]
