from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List
import yaml

from .config import SETTINGS, fs_path, load_profile
from .core.uid_cache import TargetDirectoryError
from .models import LinkSummary
from .service.linker import Linker, collect_documents


def print_summary(summary: LinkSummary) -> None:
    """逐文档打印结果并输出最终统计。"""
    for doc in summary.documents:
        print(f'[{doc.status}] {doc.path}: wired={doc.wired} skipped={doc.skipped} unresolved={doc.unresolved} new_refs={doc.new_declarations}')
        for err in doc.errors:
            print(f'  - {err}')
    print(
        f'\nwired: {summary.wired}, skipped: {summary.skipped}, unresolved: {summary.unresolved}, '
        f'patched documents: {summary.patched}, errored documents: {summary.errored}'
    )


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description='Inject resource references into serialized .tres documents')
    parser.add_argument('--profile', type=Path, required=True, help='YAML link profile')
    parser.add_argument('--project-root', type=Path, default=Path(SETTINGS.project_root), help='Project root that res:// paths resolve against')
    parser.add_argument('--dry-run', action='store_true', help='Report what would change without writing files')
    parser.add_argument('paths', nargs='*', type=Path, help='Documents or directories to patch (defaults to the profile documents_dir)')
    args = parser.parse_args(argv)

    try:
        profile = load_profile(args.profile)
        linker = Linker.for_project(profile, args.project_root)
        inputs = list(args.paths)
        if not inputs and profile.documents_dir:
            inputs = [fs_path(profile.documents_dir, args.project_root)]
    except (TargetDirectoryError, OSError, ValueError, yaml.YAMLError) as err:
        print(f'error: {err}', file=sys.stderr)
        return 2
    if not inputs:
        parser.error('no documents given and profile has no documents_dir')
    documents: List[Path] = []
    for item in inputs:
        if item.is_dir():
            documents.extend(collect_documents(item, profile.extension))
        else:
            documents.append(item)

    print(f'Linking {len(documents)} documents against {len(linker.cache)} targets in {profile.target_dir}')
    summary = linker.link_documents(documents, dry_run=args.dry_run)
    print_summary(summary)
    return 1 if summary.errored else 0


if __name__ == '__main__':
    sys.exit(main())
