from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, computed_field

DEFAULT_SIZE_TOKENS = ['d20', 'd12', 'd10', 'd8', 'd6', 'd4']
DEFAULT_ELEMENT_TOKENS = ['fire', 'ice', 'lightning', 'poison', 'holy', 'shadow']


class LinkProfile(BaseModel):
    """一次链接任务的配置：目标目录、字段名与名称解析词表。"""
    target_dir: str
    documents_dir: str = ''
    category_field: str = 'category'
    category_value: Optional[str] = None
    name_field: str = 'name'
    target_field: str
    collection: bool = False
    type_script: Optional[str] = None
    size_tokens: List[str] = Field(default_factory=lambda: list(DEFAULT_SIZE_TOKENS))
    element_tokens: List[str] = Field(default_factory=lambda: list(DEFAULT_ELEMENT_TOKENS))
    none_token: str = 'none'
    extension: str = '.tres'


class DocumentReport(BaseModel):
    """单个文档的链接结果。"""
    path: str
    status: Literal['patched', 'unchanged', 'skipped', 'error'] = 'unchanged'
    wired: int = 0
    skipped: int = 0
    unresolved: int = 0
    new_declarations: int = 0
    errors: List[str] = Field(default_factory=list)


class LinkSummary(BaseModel):
    """一批文档的汇总统计。"""
    documents: List[DocumentReport] = Field(default_factory=list)

    @computed_field
    @property
    def wired(self) -> int:
        return sum(d.wired for d in self.documents)

    @computed_field
    @property
    def skipped(self) -> int:
        return sum(d.skipped for d in self.documents)

    @computed_field
    @property
    def unresolved(self) -> int:
        return sum(d.unresolved for d in self.documents)

    @computed_field
    @property
    def patched(self) -> int:
        return sum(1 for d in self.documents if d.status == 'patched')

    @computed_field
    @property
    def errored(self) -> int:
        return sum(1 for d in self.documents if d.status in ('error', 'skipped'))
