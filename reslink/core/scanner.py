from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from .document import EXT_TAG, HEADER_TAGS, ROOT_TAG, SUB_TAG, count_quotes, parse_field, parse_section, unquote

LineKind = Literal['header', 'external_ref_decl', 'block_start', 'block_field', 'block_end', 'root_marker']


@dataclass
class ScannedLine:
    line_index: int
    kind: LineKind


@dataclass
class Block:
    """一个内嵌对象块（或根对象段）的行范围与属性。"""
    start: int
    end: int
    kind: Literal['sub_resource', 'root']
    block_id: str = ''
    category_tag: Optional[str] = None
    name_field: Optional[str] = None
    already_has_target_field: bool = False
    last_line: int = -1

    @property
    def is_root(self) -> bool:
        return self.kind == 'root'


@dataclass
class ScanResult:
    lines: List[ScannedLine] = field(default_factory=list)
    blocks: List[Block] = field(default_factory=list)

    @property
    def sub_blocks(self) -> List[Block]:
        return [b for b in self.blocks if not b.is_root]

    @property
    def root(self) -> Optional[Block]:
        for block in self.blocks:
            if block.is_root:
                return block
        return None

    @property
    def is_flat(self) -> bool:
        """没有内嵌块，只有根对象段。"""
        return not self.sub_blocks

    def kinds(self, kind: LineKind) -> List[int]:
        return [entry.line_index for entry in self.lines if entry.kind == kind]


class BlockScanner:
    """单次前向扫描文档行，识别头部、声明、内嵌块与根对象段。"""
    def __init__(self, name_field: str, category_field: str, target_field: str):
        self.name_field = name_field
        self.category_field = category_field
        self.target_field = target_field

    def scan(self, lines: List[str]) -> ScanResult:
        result = ScanResult()
        state = 'header'
        current: Block | None = None
        in_string = False

        def close(end: int) -> None:
            nonlocal current
            if current is None:
                return
            current.end = end
            if current.last_line >= 0:
                result.lines.append(ScannedLine(current.last_line, 'block_end'))
            result.blocks.append(current)
            current = None

        for idx, line in enumerate(lines):
            if in_string and current is not None:
                # Continuation of a multi-line string value.
                if line.strip():
                    current.last_line = idx
                if count_quotes(line) % 2:
                    in_string = False
                continue
            if not line.strip():
                continue
            section = parse_section(line)
            if section is not None:
                tag, attrs = section
                if tag in HEADER_TAGS and state == 'header':
                    result.lines.append(ScannedLine(idx, 'header'))
                    state = 'declarations'
                elif tag == EXT_TAG and state in ('header', 'declarations'):
                    result.lines.append(ScannedLine(idx, 'external_ref_decl'))
                    state = 'declarations'
                elif tag == SUB_TAG and state != 'root':
                    close(idx)
                    current = Block(start=idx, end=len(lines), kind='sub_resource', block_id=attrs.get('id', ''), last_line=idx)
                    result.lines.append(ScannedLine(idx, 'block_start'))
                    state = 'blocks'
                elif tag == ROOT_TAG and state != 'root':
                    close(idx)
                    current = Block(start=idx, end=len(lines), kind='root', last_line=idx)
                    result.lines.append(ScannedLine(idx, 'root_marker'))
                    state = 'root'
                else:
                    raise ValueError(f'unexpected [{tag}] section at line {idx + 1}')
                continue

            if current is None:
                # Flat document without a [resource] marker: the body is the root.
                current = Block(start=idx, end=len(lines), kind='root', last_line=idx)
                state = 'root'
            current.last_line = idx
            parsed = parse_field(line)
            if parsed is None:
                continue
            key, value = parsed
            result.lines.append(ScannedLine(idx, 'block_field'))
            in_string = count_quotes(value) % 2 == 1
            if key == self.category_field:
                current.category_tag = unquote(value)
            elif key == self.name_field:
                current.name_field = unquote(value)
            if key == self.target_field:
                current.already_has_target_field = True

        close(len(lines))
        return result
