from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, Optional, Sequence

from .assets.collector import AssetCollector, CategoryReport, default_categories, with_source_overrides
from .config import load_config
from .logging_utils import DEFAULT_LOG_PATH, configure_logging

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "Windows"


def run_collect(
    *,
    output: str,
    only: Optional[Sequence[str]] = None,
    config_path: Optional[str] = None,
    metadata: Optional[bool] = None,
) -> Dict[str, CategoryReport]:
    cfg = load_config(config_path)
    categories = with_source_overrides(default_categories(), cfg.collector_sources)
    if only:
        known = {c.name for c in categories}
        unknown = [o for o in only if o not in known]
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(unknown)} (known: {', '.join(sorted(known))})")
        categories = [c for c in categories if c.name in only]

    collector = AssetCollector(output, metadata_available=metadata)
    return collector.collect_all(categories)


def summarize(reports: Dict[str, CategoryReport]) -> str:
    lines = []
    for name, r in reports.items():
        if r.skipped:
            lines.append(f"{name:<14} skipped (no source)")
        else:
            lines.append(f"{name:<14} {len(r.copied):>5} copied {len(r.failed):>5} failed")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="trixie-collect",
        description="Export fonts, wallpapers and the account picture from Windows.",
    )
    p.add_argument("--output", default=DEFAULT_OUTPUT, help="Output root (default: ./Windows)")
    p.add_argument("--only", nargs="+", default=None, help="Categories to collect (default: all)")
    p.add_argument("--config", default=None, help="YAML config with collector.sources overrides")
    p.add_argument("--no-metadata", action="store_true", help="Keep cache file names for cloud fonts")
    p.add_argument("--log", default=DEFAULT_LOG_PATH)

    args = p.parse_args(argv)
    configure_logging(log_path=args.log)

    reports = run_collect(
        output=args.output,
        only=args.only,
        config_path=args.config,
        metadata=False if args.no_metadata else None,
    )
    print(summarize(reports))

    if reports and all(r.skipped for r in reports.values()):
        logger.error("None of the source folders exist; nothing collected.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
