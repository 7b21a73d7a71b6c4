from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Any, Dict
import yaml

from .models import LinkProfile

RES_SCHEME = 'res://'


@dataclass(frozen=True)
class Settings:
    """从环境变量派生的运行时配置。"""
    project_root: str = os.getenv('RESLINK_PROJECT_ROOT', os.getcwd())
    extension: str = os.getenv('RESLINK_EXTENSION', '.tres')

SETTINGS = Settings()


def fs_path(res: str, project_root: Path) -> Path:
    """把 res:// 路径映射回项目根目录下的文件系统路径。"""
    if not res.startswith(RES_SCHEME):
        raise ValueError(f'not a res:// path: {res}')
    return project_root / res[len(RES_SCHEME):]


def _normalize_profile(payload: Dict[str, Any]) -> LinkProfile:
    """清洗外部输入并映射成 LinkProfile。"""
    data = dict(payload)
    data.setdefault('extension', SETTINGS.extension)
    if 'target_dir' in data:
        data['target_dir'] = str(data['target_dir']).rstrip('/')
    if 'extension' in data and not str(data['extension']).startswith('.'):
        data['extension'] = '.' + str(data['extension'])
    tokens = data.get('size_tokens')
    if tokens is not None:
        data['size_tokens'] = [str(t).lower() for t in tokens]
    tokens = data.get('element_tokens')
    if tokens is not None:
        data['element_tokens'] = [str(t).lower() for t in tokens]
    return LinkProfile(**data)


def load_profile(path: Path) -> LinkProfile:
    """从 YAML 文件加载链接配置。"""
    data = yaml.safe_load(path.read_text(encoding='utf-8'))
    if not isinstance(data, dict):
        raise ValueError('profile must be a mapping')
    if 'target_field' not in data:
        raise ValueError('profile missing field: target_field')
    if 'target_dir' not in data:
        raise ValueError('profile missing field: target_dir')
    return _normalize_profile(data)
