"""
Property Manager CLI
====================

Usage:
    python -m props_ops scan [ROOT]
    python -m props_ops apply-template TEMPLATE TARGET [TARGET ...] --keys a,b
        [--position below|above|remove] [--preserve k1,k2] [--preserve-all]
    python -m props_ops reorder [ROOT] --order a,b,c [--force]
    python -m props_ops find-template QUERY SOURCE [SOURCE ...] [--recursive]

ROOT defaults to PROPS_ROOT (or the current directory). find-template only
reports matches scoring at least PROPS_FUZZY_THRESHOLD.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .aggregate import apply_property_order, check_reorder, infer_display_type, scan
from .cache import PropertyCache
from .codec import display_type_label, preview_value
from .config import PropsConfig
from .merge import MergePolicy, apply_template
from .selection import (
    DirectorySource,
    DocumentSource,
    TemplateSource,
    discover_documents,
    find_template,
    resolve_templates,
)
from .store import FileDocumentStore
from .types import BatchReport

logger = logging.getLogger(__name__)
console = Console()


def _split(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def _print_report(report: BatchReport, action: str) -> int:
    style = "green" if report.failed == 0 else "yellow"
    console.print(f"[{style}]{action} {report.summary()} documents[/{style}]")
    for result in report.results:
        if not result.ok:
            console.print(f"  [red]{result.path}[/red]: {result.error}")
    return 0 if report.failed == 0 else 1


async def cmd_scan(config: PropsConfig, root: str) -> int:
    docs = await discover_documents(root, config.include_glob)
    cache = PropertyCache(FileDocumentStore(config.make_backup))
    entries = await scan(cache, docs)
    verdict = await check_reorder(cache, docs)

    table = Table(title=f"Properties in {len(docs)} documents", box=box.SIMPLE)
    table.add_column("Property")
    table.add_column("Type")
    table.add_column("Usage", justify="right")
    table.add_column("Sample values")
    for entry in sorted(entries.values(), key=lambda e: -e.count):
        table.add_row(
            entry.key,
            display_type_label(infer_display_type(entry.examples)),
            f"{entry.count}/{len(docs)}",
            ", ".join(preview_value(ex) for ex in entry.examples),
        )
    console.print(table)
    if verdict.can_reorder:
        console.print("[green]All documents share the same properties; reordering is possible.[/green]")
    else:
        console.print("[yellow]Documents differ in their properties; reordering is disabled.[/yellow]")
    return 0


async def cmd_apply_template(config: PropsConfig, args: argparse.Namespace) -> int:
    keys = _split(args.keys)
    if not keys:
        raise ValueError("no properties selected")
    policy = MergePolicy.from_choices(
        keys,
        positioning=args.position,
        preserve_all=args.preserve_all,
        preserve_keys=_split(args.preserve),
    )
    report = await apply_template(FileDocumentStore(config.make_backup), args.template, args.targets, keys, policy)
    return _print_report(report, "Applied template to")


async def cmd_find_template(config: PropsConfig, query: str, paths: List[str], recursive: bool) -> int:
    sources: List[TemplateSource] = [
        DirectorySource(Path(p), recursive) if Path(p).is_dir() else DocumentSource(Path(p)) for p in paths
    ]
    templates = await resolve_templates(sources)
    match = find_template(templates, query, config.fuzzy_threshold)
    if match is None:
        console.print(f"[yellow]No template among {len(templates)} matches {query!r}[/yellow]")
        return 1
    console.print(str(match), soft_wrap=True)
    return 0


async def cmd_reorder(config: PropsConfig, root: str, order: List[str], force: bool) -> int:
    docs = await discover_documents(root, config.include_glob)
    store = FileDocumentStore(config.make_backup)
    cache = PropertyCache(store)
    verdict = await check_reorder(cache, docs)
    if not verdict.can_reorder and not force:
        console.print("[red]Documents do not share an identical set of properties.[/red]")
        console.print(f"Known properties: {', '.join(verdict.ordered_keys)}")
        return 1
    report = await apply_property_order(store, docs, order, cache)
    return _print_report(report, "Reordered properties in")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        prog="props_ops",
        description="Manage header properties across Markdown documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--no-backup", action="store_true", help="Do not keep .bak copies of rewritten files")
    sub = parser.add_subparsers(dest="command", required=True)

    p_scan = sub.add_parser("scan", help="Summarize property usage")
    p_scan.add_argument("root", nargs="?")

    p_apply = sub.add_parser("apply-template", help="Merge template properties into documents")
    p_apply.add_argument("template")
    p_apply.add_argument("targets", nargs="+")
    p_apply.add_argument("--keys", required=True, help="Comma-separated properties to apply, in order")
    p_apply.add_argument("--position", default="below", choices=["below", "above", "remove"])
    p_apply.add_argument("--preserve", help="Comma-separated properties whose existing values are kept")
    p_apply.add_argument("--preserve-all", action="store_true", help="Keep every existing value")

    p_reorder = sub.add_parser("reorder", help="Rewrite headers in a given key order")
    p_reorder.add_argument("root", nargs="?")
    p_reorder.add_argument("--order", required=True, help="Comma-separated key order")
    p_reorder.add_argument("--force", action="store_true", help="Reorder even when key sets differ")

    p_find = sub.add_parser("find-template", help="Fuzzy-match a template by title")
    p_find.add_argument("query")
    p_find.add_argument("sources", nargs="+", help="Template documents or directories")
    p_find.add_argument("--recursive", action="store_true", help="Search template directories recursively")

    args = parser.parse_args(argv)
    config = PropsConfig.from_env()
    if args.no_backup:
        config.make_backup = False
    logging.basicConfig(level=logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.INFO))

    try:
        if args.command == "scan":
            return asyncio.run(cmd_scan(config, args.root or config.root))
        if args.command == "apply-template":
            return asyncio.run(cmd_apply_template(config, args))
        if args.command == "find-template":
            return asyncio.run(cmd_find_template(config, args.query, args.sources, args.recursive))
        return asyncio.run(cmd_reorder(config, args.root or config.root, _split(args.order), args.force))
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return 2
    except KeyboardInterrupt:
        logger.warning("interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
