from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import os
import re
import tempfile

SECTION_RE = re.compile(r'^\[(?P<tag>[a-z_]+)(?P<attrs>[^\]]*)\]\s*$')
ATTR_RE = re.compile(r'(\w+)=("([^"]*)"|[^\s\]]+)')
FIELD_RE = re.compile(r'^(?P<key>[A-Za-z_][\w/]*)\s*=\s*(?P<value>.*)$')

HEADER_TAGS = ('gd_resource', 'gd_scene')
EXT_TAG = 'ext_resource'
SUB_TAG = 'sub_resource'
ROOT_TAG = 'resource'


def parse_section(line: str) -> Optional[tuple[str, Dict[str, str]]]:
    """解析 [tag key="value" ...] 形式的段标记行。"""
    match = SECTION_RE.match(line.strip())
    if not match:
        return None
    attrs: Dict[str, str] = {}
    for key, raw, quoted in ATTR_RE.findall(match.group('attrs')):
        attrs[key] = quoted if raw.startswith('"') else raw
    return match.group('tag'), attrs


def parse_field(line: str) -> Optional[tuple[str, str]]:
    """解析 `key = value` 字段行，返回 (key, value)。"""
    match = FIELD_RE.match(line)
    if not match:
        return None
    return match.group('key'), match.group('value').strip()


def count_quotes(text: str) -> int:
    """统计未被反斜杠转义的双引号数量。"""
    count = 0
    escaped = False
    for ch in text:
        if escaped:
            escaped = False
        elif ch == '\\':
            escaped = True
        elif ch == '"':
            count += 1
    return count


def unquote(value: str) -> str:
    """去掉字符串字段两端的引号。"""
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1].replace('\\"', '"')
    return value


@dataclass
class ExtResourceDecl:
    """文档中的一条外部资源声明。"""
    local_id: str
    type: str
    path: str
    uid: str
    line_index: int

    def render(self) -> str:
        """渲染为 ext_resource 声明行。"""
        uid_part = f' uid="{self.uid}"' if self.uid else ''
        return f'[ext_resource type="{self.type}"{uid_part} path="{self.path}" id="{self.local_id}"]'


@dataclass
class Document:
    """按行保存的一个序列化资源文档。"""
    path: Path
    lines: List[str] = field(default_factory=list)
    trailing_newline: bool = True
    newline: str = '\n'
    bom: bool = False

    @classmethod
    def from_text(cls, path: Path, text: str) -> 'Document':
        bom = text.startswith('\ufeff')
        if bom:
            text = text[1:]
        return cls(
            path=path,
            lines=text.splitlines(),
            trailing_newline=text.endswith('\n'),
            newline='\r\n' if '\r\n' in text else '\n',
            bom=bom,
        )

    @classmethod
    def load(cls, path: Path) -> 'Document':
        """从磁盘读取文档，保留 BOM 与换行风格。"""
        return cls.from_text(path, path.read_bytes().decode('utf-8'))

    def render(self) -> str:
        text = self.newline.join(self.lines)
        if self.trailing_newline:
            text += self.newline
        return text

    def save(self) -> None:
        """原子写回：先写同目录临时文件，再替换原文件。"""
        fd, tmp_name = tempfile.mkstemp(prefix=f'.{self.path.name}.', suffix='.tmp', dir=self.path.parent)
        try:
            encoding = 'utf-8-sig' if self.bom else 'utf-8'
            with os.fdopen(fd, 'w', encoding=encoding, newline='') as f:
                f.write(self.render())
            os.replace(tmp_name, self.path)
        except Exception:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @property
    def header_index(self) -> int:
        """头部行的下标；文档必须以头部段开始。"""
        for idx, line in enumerate(self.lines):
            if not line.strip():
                continue
            parsed = parse_section(line)
            if parsed and parsed[0] in HEADER_TAGS:
                return idx
            break
        raise ValueError(f'document has no resource header: {self.path}')

    def ext_resources(self) -> List[ExtResourceDecl]:
        """列出正文之前的全部外部资源声明。"""
        decls: List[ExtResourceDecl] = []
        for idx, line in enumerate(self.lines):
            parsed = parse_section(line)
            if parsed is None:
                if parse_field(line) is not None:
                    break
                continue
            if parsed[0] in (SUB_TAG, ROOT_TAG):
                break
            if parsed[0] != EXT_TAG:
                continue
            attrs = parsed[1]
            decls.append(ExtResourceDecl(
                local_id=attrs.get('id', ''),
                type=attrs.get('type', ''),
                path=attrs.get('path', ''),
                uid=attrs.get('uid', ''),
                line_index=idx,
            ))
        return decls

