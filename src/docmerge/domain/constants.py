"""
Domain Constants: 파이프라인 전역 상수.

파트 이름, 파트 패턴, XML 네임스페이스 등 시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# Package Parts (패키지 파트 이름)
# =============================================================================
# word/document.xml: 본문 (primary content part)
# word/header1.xml, word/footer2.xml ...: 머리글/바닥글

PRIMARY_PART = "word/document.xml"

PRIMARY_PART_PATTERN = r"word/document.xml"
HEADER_FOOTER_PATTERN = r"word/(?:header|footer)\d*\.xml"

# 파싱 대상 엔트리 (나머지는 bytes 그대로 유지)
XML_ENTRY_SUFFIXES = (".xml", ".rels")

# =============================================================================
# Zip Metadata
# =============================================================================
# 디렉터리 레코드 및 신규 엔트리의 고정 타임스탬프 (결정론적 출력)

ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

# =============================================================================
# Repair
# =============================================================================
# 참조 id 보정 대상 (LibreOffice 산출물에서 "r:" 누락 관찰)
REFERENCE_TAGS = ("headerReference", "footerReference")

# =============================================================================
# Run Log
# =============================================================================

RUN_ID_PREFIX = "RUN-"
RUN_LOG_FILENAME_PATTERN = "run_*.json"
