from __future__ import annotations

from typing import List, Optional, Sequence

from ..models import DEFAULT_ELEMENT_TOKENS, DEFAULT_SIZE_TOKENS, LinkProfile


def _first_match(label: str, tokens: Sequence[str]) -> Optional[str]:
    """按词表顺序返回第一个包含在 label 中的词。"""
    for token in tokens:
        if token in label:
            return token
    return None


class NameResolver:
    """根据名称中的尺寸/元素词把标签映射为目标资源路径。"""
    def __init__(
        self,
        base_dir: str,
        size_tokens: Sequence[str] = DEFAULT_SIZE_TOKENS,
        element_tokens: Sequence[str] = DEFAULT_ELEMENT_TOKENS,
        none_token: str = 'none',
        extension: str = '.tres',
    ):
        self.base_dir = base_dir.rstrip('/')
        self.size_tokens: List[str] = [t.lower() for t in size_tokens]
        self.element_tokens: List[str] = [t.lower() for t in element_tokens]
        self.none_token = none_token
        self.extension = extension

    @classmethod
    def from_profile(cls, profile: LinkProfile) -> 'NameResolver':
        return cls(
            profile.target_dir,
            size_tokens=profile.size_tokens,
            element_tokens=profile.element_tokens,
            none_token=profile.none_token,
            extension=profile.extension,
        )

    def tokens(self, label: str) -> tuple[Optional[str], str]:
        """返回 (size, element)；size 缺失时为 None。"""
        lowered = label.lower()
        size = _first_match(lowered, self.size_tokens)
        element = _first_match(lowered, self.element_tokens) or self.none_token
        return size, element

    def resolve(self, label: str) -> Optional[str]:
        """解析标签；没有尺寸词时返回 None，由调用方跳过。"""
        size, element = self.tokens(label)
        if size is None:
            return None
        return f'{self.base_dir}/{size}_{element}{self.extension}'
