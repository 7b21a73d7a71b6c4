from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping

from .header import read_uid


class TargetDirectoryError(RuntimeError):
    """目标资源目录无法打开，整个链接任务无法继续。"""


def _read_first_line(path: Path) -> str:
    """只读取文件第一行。"""
    with path.open('r', encoding='utf-8-sig') as f:
        return f.readline()


def build_uid_cache(directory: Path, res_dir: str, extension: str = '.tres') -> Mapping[str, str]:
    """扫描目标目录，建立 res 路径到 uid 的只读映射。"""
    if not directory.is_dir():
        raise TargetDirectoryError(f'target directory not found: {directory}')
    try:
        entries = sorted(directory.iterdir())
    except OSError as err:
        raise TargetDirectoryError(f'cannot open target directory {directory}: {err}') from err
    cache: Dict[str, str] = {}
    prefix = res_dir.rstrip('/')
    for path in entries:
        if not path.is_file() or path.suffix != extension:
            continue
        try:
            header = _read_first_line(path)
        except (OSError, UnicodeDecodeError):
            # Unreadable header counts as a document without a uid.
            header = ''
        cache[f'{prefix}/{path.name}'] = read_uid(header)
    return MappingProxyType(cache)
