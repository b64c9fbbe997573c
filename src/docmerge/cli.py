"""
docmerge CLI - DOCX 템플릿 렌더링

컨텍스트 파일(YAML/JSON)마다 mapping 하나 또는 mapping 목록을 담는다.
여러 컨텍스트는 순서대로 한 문서 안에 섹션별로 이어 붙여진다.

사용법:
    # 단일 컨텍스트
    docmerge letter.docx -c alice.yaml -o out/alice.docx

    # 여러 컨텍스트 → 한 문서
    docmerge letter.docx -c alice.yaml -c bob.yaml -o out/letters.docx

    # 레이아웃 옵션 + run log 저장
    docmerge letter.docx -c people.yaml -o out.docx --set start_page_number=5 --logs-dir logs
"""

import argparse
import logging
from pathlib import Path
from typing import Any

import yaml

from docmerge.config import load_config
from docmerge.domain.errors import DocMergeError, ErrorCodes
from docmerge.render.pipeline import Template

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def load_contexts(paths: list[Path]) -> list[Any]:
    """
    컨텍스트 파일 로드.

    Raises:
        DocMergeError: INVALID_CONTEXT (읽기/파싱 실패, mapping/list 아님)
    """
    contexts: list[Any] = []
    for path in paths:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise DocMergeError(
                ErrorCodes.INVALID_CONTEXT,
                path=str(path),
                reason=str(e),
            ) from e

        if isinstance(data, dict):
            contexts.append(data)
        elif isinstance(data, list):
            contexts.extend(data)
        else:
            raise DocMergeError(
                ErrorCodes.INVALID_CONTEXT,
                path=str(path),
                reason=f"expected mapping or list, got {type(data).__name__}",
            )
    return contexts


def parse_properties(items: list[str]) -> dict[str, Any]:
    """'key=value' 목록 → dict (값은 YAML 스칼라로 해석: 5 → int)."""
    properties: dict[str, Any] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"expected key=value, got {item!r}")
        properties[key.strip()] = yaml.safe_load(value)
    return properties


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmerge",
        description="DOCX 템플릿 렌더링",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("template", type=Path, help="템플릿 .docx 경로")
    parser.add_argument(
        "-c", "--context",
        dest="contexts",
        type=Path,
        action="append",
        required=True,
        help="컨텍스트 파일 (YAML/JSON, 여러 번 지정 가능)",
    )
    parser.add_argument("-o", "--output", type=Path, required=True, help="출력 .docx 경로")
    parser.add_argument("--config", type=Path, default=None, help="설정 파일 (기본: default.yaml)")
    parser.add_argument(
        "--set",
        dest="properties",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="레이아웃 옵션 (예: start_page_number=5)",
    )
    parser.add_argument("--logs-dir", type=Path, default=None, help="run log 저장 디렉터리")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        properties = parse_properties(args.properties)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        config = load_config(args.config)
    except DocMergeError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
        logger.error(f"설정 로드 실패: {e}")
        return 1

    logging.basicConfig(
        level=str(config["logging"].get("level", "INFO")).upper(),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    if args.logs_dir is not None:
        config["logging"]["run_logs_dir"] = str(args.logs_dir)

    try:
        contexts = load_contexts(args.contexts)
        template = Template(args.template, config=config)
        template.render_to_file(args.output, contexts, properties)
    except DocMergeError as e:
        logger.error(f"렌더링 실패: {e}")
        return 1

    logger.info(f"완료: {args.output} ({len(contexts)} context(s))")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
