from __future__ import annotations

import re

LOAD_STEPS_RE = re.compile(r'(\bload_steps=)(\d+)')
UID_RE = re.compile(r'\buid="([^"]*)"')
FORMAT_RE = re.compile(r'\sformat=')


def read_uid(header_line: str) -> str:
    """从头部行读取 uid，缺失时返回空字符串。"""
    match = UID_RE.search(header_line)
    return match.group(1) if match else ''


def read_load_steps(header_line: str) -> int:
    """读取 load_steps 计数，未声明时视为 1。"""
    match = LOAD_STEPS_RE.search(header_line)
    return int(match.group(2)) if match else 1


def bump_load_steps(header_line: str, n: int) -> str:
    """把 load_steps 增加 n，只改写数字部分。"""
    if n == 0:
        return header_line
    if n < 0:
        raise ValueError('load_steps can only grow')
    match = LOAD_STEPS_RE.search(header_line)
    if match:
        value = int(match.group(2)) + n
        return header_line[:match.start(2)] + str(value) + header_line[match.end(2):]
    # Godot omits load_steps when the document has no dependencies.
    attr = f' load_steps={1 + n}'
    fmt = FORMAT_RE.search(header_line)
    if fmt:
        return header_line[:fmt.start()] + attr + header_line[fmt.start():]
    close = header_line.rfind(']')
    if close == -1:
        raise ValueError('header line is not a section marker')
    return header_line[:close] + attr + header_line[close:]
