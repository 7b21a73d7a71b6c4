from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping

from ..config import fs_path
from ..core.document import Document
from ..core.header import bump_load_steps
from ..core.injector import MissingTypeIdentityError, ReferenceInjector, UnresolvedTargetError
from ..core.name_resolver import NameResolver
from ..core.scanner import Block, BlockScanner, ScanResult
from ..core.uid_cache import build_uid_cache
from ..models import DocumentReport, LinkProfile, LinkSummary


def collect_documents(directory: Path, extension: str = '.tres') -> List[Path]:
    """列出目录下（递归）全部待处理文档。"""
    return sorted(p for p in directory.rglob(f'*{extension}') if p.is_file())


class Linker:
    """按配置把目标资源引用批量写入文档。"""
    def __init__(self, profile: LinkProfile, cache: Mapping[str, str], resolver: NameResolver | None = None):
        self.profile = profile
        self.cache = cache
        self.resolver = resolver or NameResolver.from_profile(profile)
        self.scanner = BlockScanner(
            name_field=profile.name_field,
            category_field=profile.category_field,
            target_field=profile.target_field,
        )

    @classmethod
    def for_project(cls, profile: LinkProfile, project_root: Path) -> 'Linker':
        """扫描项目内的目标目录并构建 Linker；目录无法打开时抛出异常。"""
        target_dir = fs_path(profile.target_dir, project_root)
        cache = build_uid_cache(target_dir, profile.target_dir, profile.extension)
        return cls(profile, cache)

    def link_documents(self, paths: Iterable[Path], dry_run: bool = False) -> LinkSummary:
        """依次处理每个文档，错误只影响所在文档。"""
        summary = LinkSummary()
        for path in paths:
            summary.documents.append(self.link_document(path, dry_run=dry_run))
        return summary

    def link_document(self, path: Path, dry_run: bool = False) -> DocumentReport:
        """处理单个文档：扫描、解析、规划插入、修正计数并写回。"""
        report = DocumentReport(path=str(path))
        try:
            document = Document.load(path)
            scan = self.scanner.scan(document.lines)
            injector = ReferenceInjector(document, self.cache, type_script=self.profile.type_script)
            for block in self._anchors(scan):
                if block.already_has_target_field:
                    report.skipped += 1
                    continue
                label = block.name_field or ''
                target = self.resolver.resolve(label)
                if target is None:
                    report.unresolved += 1
                    report.errors.append(f'unresolved label {label!r}')
                    continue
                try:
                    injector.plan(
                        block,
                        target,
                        self.profile.target_field,
                        collection=self.profile.collection and not block.is_root,
                    )
                except UnresolvedTargetError as err:
                    report.unresolved += 1
                    report.errors.append(str(err))
            report.new_declarations = injector.new_declarations
            report.wired = injector.apply()
            if report.wired == 0:
                return report
            header_index = document.header_index
            document.lines[header_index] = bump_load_steps(document.lines[header_index], report.new_declarations)
            if not dry_run:
                document.save()
            report.status = 'patched'
        except MissingTypeIdentityError as err:
            report.status = 'skipped'
            report.wired = 0
            report.new_declarations = 0
            report.errors.append(str(err))
        except (OSError, ValueError) as err:
            report.status = 'error'
            report.wired = 0
            report.new_declarations = 0
            report.errors.append(str(err))
        return report

    def _anchors(self, scan: ScanResult) -> List[Block]:
        """选出需要接线的锚点：匹配分类的内嵌块；扁平文档则为根对象段。"""
        if scan.is_flat:
            candidates = [scan.root] if scan.root else []
        else:
            candidates = scan.sub_blocks
        value = self.profile.category_value
        if value is None:
            return candidates
        return [b for b in candidates if b.category_tag == value]
