"""
Processor 추상 인터페이스.

processor = 엔트리 하나의 파싱된 트리를 렌더 환경에 따라 제자리 수정하는 플러그인.
ProcessorRegistry에 파트 이름 패턴과 함께 등록된다.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from docmerge.render.environment import Environment


class Processor(ABC):
    """
    Processor 기본 클래스.

    구현체는 process()만 제공하면 된다. 반환값은 없고 content를 직접 수정한다.
    """

    @property
    def name(self) -> str:
        """run log에 기록되는 이름."""
        return type(self).__name__

    @abstractmethod
    def process(self, content: Any, env: "Environment") -> None:
        """
        엔트리 내용 처리.

        Args:
            content: lxml ElementTree (XML 엔트리) 또는 bytes
            env: 현재 컨텍스트의 렌더 환경
        """
        ...

    def __repr__(self) -> str:
        return f"<{self.name}>"
