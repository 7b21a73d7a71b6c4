from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Set
import hashlib
import re

from .document import Document, ExtResourceDecl
from .scanner import Block

LOCAL_ID_RE = re.compile(r'^(\d+)_')


class UnresolvedTargetError(ValueError):
    """目标路径不在缓存中，跳过该锚点。"""


class MissingTypeIdentityError(ValueError):
    """文档缺少构造类型化数组所需的脚本引用，跳过整个文档。"""


def single_reference(local_id: str) -> str:
    return f'ExtResource("{local_id}")'


def typed_collection(type_id: str, local_ids: List[str]) -> str:
    refs = ', '.join(single_reference(i) for i in local_ids)
    return f'Array[{single_reference(type_id)}]([{refs}])'


@dataclass
class Splice:
    """一次待插入的字段赋值。"""
    block: Block
    field_line: str
    field_index: int
    local_id: str
    new_declaration: bool


class ReferenceInjector:
    """为一个文档规划并应用外部引用声明与字段赋值的插入。"""
    def __init__(
        self,
        document: Document,
        cache: Mapping[str, str],
        type_script: Optional[str] = None,
        resource_type: str = 'Resource',
    ):
        self.document = document
        self.cache = cache
        self.type_script = type_script
        self.resource_type = resource_type
        self._existing = document.ext_resources()
        self._queued: List[ExtResourceDecl] = []
        self._splices: List[Splice] = []

    @property
    def new_declarations(self) -> int:
        """本文档新增的不同声明数（用于修正 load_steps）。"""
        return len(self._queued)

    def type_identity(self) -> ExtResourceDecl:
        """返回用于标注数组元素类型的脚本声明。"""
        if not self.type_script:
            raise MissingTypeIdentityError('collection field requires a type_script')
        for decl in self._existing:
            if decl.type == 'Script' and decl.path == self.type_script:
                return decl
        raise MissingTypeIdentityError(f'no Script ext_resource for {self.type_script}')

    def plan(self, block: Block, target_path: str, field: str, collection: bool = False) -> Splice:
        """为一个锚点规划插入；尚不修改文档。"""
        if target_path not in self.cache:
            raise UnresolvedTargetError(f'target not found: {target_path}')
        type_decl = self.type_identity() if collection else None
        local_id, is_new = self._declare(target_path, self.cache[target_path])
        if type_decl is not None:
            value = typed_collection(type_decl.local_id, [local_id])
        else:
            value = single_reference(local_id)
        splice = Splice(
            block=block,
            field_line=f'{field} = {value}',
            field_index=block.last_line + 1,
            local_id=local_id,
            new_declaration=is_new,
        )
        self._splices.append(splice)
        return splice

    def apply(self) -> int:
        """自下而上应用全部插入，返回插入的字段数。"""
        insertions: List[tuple[int, List[str]]] = []
        for splice in self._splices:
            insertions.append((splice.field_index, [splice.field_line]))
        if self._queued:
            insertions.append(self._declaration_insertion())
        insertions.sort(key=lambda x: x[0], reverse=True)
        lines = self.document.lines
        for index, new_lines in insertions:
            lines[index:index] = new_lines
        for splice in self._splices:
            self._shift_block(splice, insertions)
        applied = len(self._splices)
        self._splices = []
        self._existing = self.document.ext_resources()
        self._queued = []
        return applied

    @staticmethod
    def _shift_block(splice: Splice, insertions: List[tuple[int, List[str]]]) -> None:
        """按已应用的插入更新锚点块的行范围。"""
        block = splice.block
        block.start += sum(len(n) for i, n in insertions if i <= block.start)
        block.last_line = splice.field_index + sum(len(n) for i, n in insertions if i < splice.field_index)
        block.end += sum(len(n) for i, n in insertions if i < block.end or i == splice.field_index)

    def _declaration_insertion(self) -> tuple[int, List[str]]:
        """新声明紧跟在最后一条已有声明之后；没有声明时放在头部之后。"""
        new_lines = [decl.render() for decl in self._queued]
        if self._existing:
            return self._existing[-1].line_index + 1, new_lines
        return self.document.header_index + 1, [''] + new_lines

    def _declare(self, target_path: str, uid: str) -> tuple[str, bool]:
        """复用已有或已排队的声明，否则排队一条新声明。"""
        for decl in self._existing + self._queued:
            if decl.path == target_path:
                return decl.local_id, False
        local_id = self._new_local_id(target_path)
        self._queued.append(ExtResourceDecl(
            local_id=local_id,
            type=self.resource_type,
            path=target_path,
            uid=uid,
            line_index=-1,
        ))
        return local_id, True

    def _new_local_id(self, target_path: str) -> str:
        taken: Set[str] = {d.local_id for d in self._existing + self._queued}
        numbers = [int(m.group(1)) for m in (LOCAL_ID_RE.match(i) for i in taken) if m]
        n = max(numbers, default=0) + 1
        seed = target_path
        while True:
            local_id = f'{n}_{hashlib.sha1(seed.encode("utf-8")).hexdigest()[:5]}'
            if local_id not in taken:
                return local_id
            seed += '#'
