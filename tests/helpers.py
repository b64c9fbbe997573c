"""
Test helpers: 최소 .docx 패키지 빌더 및 zip 조회.
"""

import io
import zipfile

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

SECT_PR = (
    "<w:sectPr>"
    '<w:headerReference w:type="default" r:id="rId7"/>'
    '<w:pgSz w:w="12240" w:h="15840"/>'
    '<w:pgMar w:top="1440" w:right="1440" w:bottom="1440" w:left="1440"/>'
    '<w:cols w:space="720"/>'
    "</w:sectPr>"
)

CONTENT_TYPES_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Default Extension="png" ContentType="image/png"/>'
    '<Override PartName="/word/document.xml" '
    'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
    "</Types>"
)

PACKAGE_RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1" '
    'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" '
    'Target="word/document.xml"/>'
    "</Relationships>"
)

DOCUMENT_RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId7" '
    'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/header" '
    'Target="header1.xml"/>'
    "</Relationships>"
)

# 테스트용 1x1 PNG 비슷한 바이너리 (내용 검증 안 함)
IMAGE_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(64))

CORE_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties">'
    "<cp:revision>1</cp:revision>"
    "</cp:coreProperties>"
)


# =============================================================================
# XML Builders
# =============================================================================


def paragraph(text: str) -> str:
    """단일 run 단락."""
    return f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>"


def document_xml(body: str) -> str:
    """w:document 전체 (w, r 네임스페이스 선언 포함)."""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<w:document xmlns:w="{W_NS}" xmlns:r="{R_NS}">'
        f"<w:body>{body}</w:body>"
        "</w:document>"
    )


def header_xml(body: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<w:hdr xmlns:w="{W_NS}" xmlns:r="{R_NS}">{body}</w:hdr>'
    )


def build_docx_bytes(entries: dict[str, str | bytes]) -> bytes:
    """엔트리 dict (순서 유지) → zip 바이트."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            zf.writestr(zipfile.ZipInfo(name, date_time=(2024, 1, 15, 9, 30, 0)), data)
    return buffer.getvalue()


def default_entries(body: str, header_body: str | None = None) -> dict[str, str | bytes]:
    """표준 최소 패키지 엔트리."""
    return {
        "[Content_Types].xml": CONTENT_TYPES_XML,
        "_rels/.rels": PACKAGE_RELS_XML,
        "word/document.xml": document_xml(body),
        "word/_rels/document.xml.rels": DOCUMENT_RELS_XML,
        "word/header1.xml": header_xml(header_body or paragraph("Company header")),
        "word/media/image1.png": IMAGE_BYTES,
        "docProps/core.xml": CORE_XML,
    }


def file_names(data: bytes) -> list[str]:
    """zip 바이트의 파일 엔트리 이름 (디렉터리 레코드 제외)."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return [n for n in zf.namelist() if not n.endswith("/")]


def read_entry(data: bytes, name: str) -> bytes:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return zf.read(name)


