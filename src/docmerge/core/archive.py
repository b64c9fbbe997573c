"""
Archive Model: .docx 패키지 ↔ 엔트리 맵.

역할:
- zip 아카이브 로드 → 엔트리 이름 → 내용(bytes 또는 lxml 트리)
- XML 엔트리는 최초 접근 시 파싱, 이후 캐시 (lazy)
- 전체 엔트리 재직렬화 (디렉터리 레코드 재생성)

주의:
- 일부 소비자(Open Office 등)는 태그 주변 공백을 무시하지 않음
  → 트리는 들여쓰기/공백 추가 없이 직렬화
- 교차 참조(하이퍼링크 등)가 있는 파일은 명시적 디렉터리 레코드가 없으면
  손상 파일로 취급될 수 있음 → 부모 디렉터리 레코드를 경로 순서대로 한 번씩 기록
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
import zlib
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any

from lxml import etree

from docmerge.domain.constants import XML_ENTRY_SUFFIXES, ZIP_EPOCH
from docmerge.domain.errors import ArchiveReadError, ErrorCodes

logger = logging.getLogger(__name__)

# 신규 파일 엔트리 기본 권한 (zipfile.writestr 기본값과 동일)
DEFAULT_FILE_ATTR = 0o600 << 16
# 디렉터리 레코드 권한 + MS-DOS directory flag
DIRECTORY_ATTR = ((0o40000 | 0o775) << 16) | 0x10

ArchiveSource = str | Path | bytes | bytearray | IO[bytes]
Content = bytes | etree._ElementTree

# 원본 XML 선언의 standalone 값 (선두 BOM/공백 허용)
_STANDALONE_RE = re.compile(
    rb"\A(?:\xef\xbb\xbf)?\s*<\?xml\b[^>]*?\bstandalone\s*=\s*[\"'](yes|no)[\"']"
)


# =============================================================================
# XML Helpers
# =============================================================================


def parse_xml(data: bytes) -> etree._ElementTree:
    """
    XML 바이트 → lxml ElementTree.

    공백 텍스트 노드는 그대로 유지 (remove_blank_text=False).

    Raises:
        etree.XMLSyntaxError: 파싱 실패
    """
    parser = etree.XMLParser(resolve_entities=False, remove_blank_text=False, huge_tree=True)
    return etree.fromstring(data, parser).getroottree()


def declared_standalone(data: bytes) -> bool | None:
    """
    XML 선언의 standalone 값.

    Returns:
        True ("yes"), False ("no"), 선언에 없으면 None
    """
    match = _STANDALONE_RE.match(data)
    if match is None:
        return None
    return match.group(1) == b"yes"


def to_xml(tree: etree._ElementTree, source: bytes | None = None) -> bytes:
    """
    lxml ElementTree → XML 바이트.

    들여쓰기 없음. 원본 XML 선언의 encoding/standalone 유지.

    Args:
        tree: 직렬화할 트리
        source: 원본 바이트 (있으면 standalone을 원본 선언에서 그대로 가져옴)

    lxml 버전에 따라 standalone 미선언 문서의 docinfo.standalone이 None 또는 False
    → source가 없으면 standalone="yes"일 때만 기록.
    """
    docinfo = tree.docinfo
    if source is not None:
        standalone = declared_standalone(source)
    else:
        standalone = True if docinfo.standalone else None

    return etree.tostring(
        tree,
        xml_declaration=True,
        encoding=docinfo.encoding or "UTF-8",
        standalone=standalone,
        pretty_print=False,
    )


def is_xml_entry(name: str) -> bool:
    """파싱 대상 엔트리 여부 (.xml, .rels)."""
    return name.lower().endswith(XML_ENTRY_SUFFIXES)


def _parent_dirs(name: str) -> Iterator[str]:
    """'word/_rels/document.xml.rels' → 'word/', 'word/_rels/'."""
    prefix = ""
    for part in name.split("/")[:-1]:
        if not part:
            continue
        prefix += part + "/"
        yield prefix


# =============================================================================
# Entry
# =============================================================================


@dataclass
class ArchiveEntry:
    """아카이브 엔트리 하나 (원본 bytes + 파싱된 트리 캐시)."""
    name: str
    raw: bytes
    date_time: tuple[int, int, int, int, int, int] = ZIP_EPOCH
    external_attr: int = DEFAULT_FILE_ATTR
    tree: etree._ElementTree | None = None

    @property
    def is_dir(self) -> bool:
        return self.name.endswith("/")

    @property
    def parsed(self) -> bool:
        return self.tree is not None

    def to_bytes(self) -> bytes:
        """출력용 바이트 (파싱된 적 없으면 원본 그대로)."""
        if self.tree is not None:
            return to_xml(self.tree, self.raw or None)
        return self.raw


# =============================================================================
# Document Model
# =============================================================================


class DocumentModel:
    """
    .docx 패키지의 메모리 내 모델.

    Usage:
        model = DocumentModel.open(Path("template.docx"))
        tree = model.get("word/document.xml")
        ...
        data = model.serialize()
    """

    def __init__(self, entries: list[ArchiveEntry] | None = None, source: str = "<memory>"):
        self.source = source
        self.current_entry: str | None = None
        self._entries: dict[str, ArchiveEntry] = {}
        for entry in entries or []:
            self._entries[entry.name] = entry

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def open(cls, source: ArchiveSource) -> "DocumentModel":
        """
        아카이브 로드.

        Args:
            source: 파일 경로, bytes, 또는 바이너리 스트림

        Returns:
            DocumentModel (엔트리는 아직 파싱되지 않음)

        Raises:
            ArchiveReadError: ARCHIVE_NOT_FOUND, ARCHIVE_INVALID
        """
        label, data = read_source(source)

        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                entries = [
                    ArchiveEntry(
                        name=info.filename,
                        raw=zf.read(info),
                        date_time=info.date_time,
                        external_attr=info.external_attr or DEFAULT_FILE_ATTR,
                    )
                    for info in zf.infolist()
                ]
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as e:
            raise ArchiveReadError(
                ErrorCodes.ARCHIVE_INVALID,
                path=label,
                error=str(e),
            ) from e

        logger.debug(f"Loaded {len(entries)} entries from {label}")
        return cls(entries, source=label)

    # -------------------------------------------------------------------------
    # Entry Access
    # -------------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def names(self) -> list[str]:
        """엔트리 이름 목록 (원본 순서)."""
        return list(self._entries)

    def entry(self, name: str) -> ArchiveEntry:
        """
        엔트리 메타데이터 조회.

        Raises:
            ArchiveReadError: ENTRY_NOT_FOUND
        """
        try:
            return self._entries[name]
        except KeyError:
            raise ArchiveReadError(
                ErrorCodes.ENTRY_NOT_FOUND,
                path=self.source,
                entry=name,
            ) from None

    def raw(self, name: str) -> bytes:
        """원본 바이트 (파싱/수정과 무관)."""
        return self.entry(name).raw

    def get(self, name: str) -> Content:
        """
        엔트리 내용 조회.

        XML 엔트리는 최초 접근 시 파싱하여 캐시한 트리를 반환,
        그 외(이미지 등)는 bytes 반환.

        Raises:
            ArchiveReadError: ENTRY_NOT_FOUND, ENTRY_UNPARSABLE
        """
        entry = self.entry(name)
        if entry.tree is not None:
            return entry.tree
        if entry.is_dir or not is_xml_entry(name):
            return entry.raw

        try:
            entry.tree = parse_xml(entry.raw)
        except etree.XMLSyntaxError as e:
            raise ArchiveReadError(
                ErrorCodes.ENTRY_UNPARSABLE,
                path=self.source,
                entry=name,
                error=str(e),
            ) from e
        return entry.tree

    def set(self, name: str, content: Any) -> None:
        """
        엔트리 교체 또는 생성.

        Args:
            name: 엔트리 이름
            content: bytes, lxml ElementTree, 또는 lxml Element
        """
        if isinstance(content, etree._Element):
            content = content.getroottree()

        existing = self._entries.get(name)
        if existing is None:
            existing = ArchiveEntry(name=name, raw=b"")
            self._entries[name] = existing

        if isinstance(content, etree._ElementTree):
            existing.tree = content
        elif isinstance(content, (bytes, bytearray)):
            existing.raw = bytes(content)
            existing.tree = None
        else:
            raise TypeError(f"Unsupported entry content for {name}: {type(content).__name__}")

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def serialize(self) -> bytes:
        """
        전체 엔트리를 zip 아카이브 바이트로 직렬화.

        - 부모 디렉터리 레코드: 경로 순서대로, 한 번씩만
        - 트리 엔트리: 들여쓰기 없이 직렬화
        - bytes 엔트리: 원본 그대로

        모델 자체는 변경되지 않으므로 여러 번 호출 가능.
        """
        buffer = io.BytesIO()
        created_dirs: set[str] = set()

        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for entry in self._entries.values():
                if entry.is_dir:
                    self._write_dirs(zf, created_dirs, entry.name, entry.date_time)
                    continue

                self._write_dirs(zf, created_dirs, entry.name, ZIP_EPOCH)

                info = zipfile.ZipInfo(entry.name, date_time=entry.date_time)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = entry.external_attr
                zf.writestr(info, entry.to_bytes())

        return buffer.getvalue()

    @staticmethod
    def _write_dirs(
        zf: zipfile.ZipFile,
        created_dirs: set[str],
        entry_name: str,
        date_time: tuple[int, int, int, int, int, int],
    ) -> None:
        """entry_name의 부모 디렉터리(및 자신이 디렉터리면 자신) 레코드 기록."""
        dirs = list(_parent_dirs(entry_name))
        if entry_name.endswith("/") and entry_name not in dirs:
            dirs.append(entry_name)

        for dir_name in dirs:
            if dir_name in created_dirs:
                continue
            info = zipfile.ZipInfo(dir_name, date_time=date_time)
            info.compress_size = 0
            info.CRC = 0
            info.file_size = 0
            info.external_attr = DIRECTORY_ATTR
            zf.mkdir(info)
            created_dirs.add(dir_name)


# =============================================================================
# Source Reading
# =============================================================================


def read_source(source: ArchiveSource) -> tuple[str, bytes]:
    """
    경로/bytes/스트림 → (표시용 라벨, 바이트).

    Raises:
        ArchiveReadError: ARCHIVE_NOT_FOUND (경로 없음/읽기 실패)
    """
    if isinstance(source, (bytes, bytearray)):
        return "<bytes>", bytes(source)

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            return str(path), path.read_bytes()
        except OSError as e:
            raise ArchiveReadError(
                ErrorCodes.ARCHIVE_NOT_FOUND,
                path=str(path),
                error=str(e),
            ) from e

    if hasattr(source, "read"):
        label = str(getattr(source, "name", "<stream>"))
        return label, source.read()

    raise TypeError(f"Unsupported archive source: {type(source).__name__}")
