"""Check the provider heuristics against a saved webmail page.

Usage:
    python scripts/probe_snapshot.py inbox.html --url https://mail.google.com/mail/u/0/
"""

import argparse
import asyncio
import os
import sys
from loguru import logger

# Add project root to path
sys.path.append(os.getcwd())

from readall.browser.snapshot_document import SnapshotDocument
from readall.diagnostics import probe_document


async def run_probe(path: str, url: str) -> int:
    if not os.path.exists(path):
        logger.error(f"Snapshot not found: {path}")
        return 1

    document = SnapshotDocument.from_file(path, url=url)
    report = await probe_document(document)

    print("-" * 80)
    print(f"{'Location':<20} | {report['location']}")
    print(f"{'Provider':<20} | {report['provider'] or 'none'}")
    if report['provider'] is None:
        print("-" * 80)
        return 1

    print(f"{'Ready marker':<20} | {'found' if report['ready'] else 'MISSING'}")
    print(f"{'Checkbox elements':<20} | {report['checkbox_candidates']}")

    master = report['master_checkbox']
    if master:
        print(f"{'Master checkbox':<20} | label={master['aria_label']!r} checked={master['aria_checked']!r} top={master['top']}")
    else:
        print(f"{'Master checkbox':<20} | MISSING")

    print("-" * 80)
    for group, counts in report['controls'].items():
        for selector, count in counts.items():
            print(f"{group:<20} | {count:>3} | {selector}")
    print("-" * 80)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Probe a saved webmail page')
    parser.add_argument('path', help='HTML file saved from the webmail tab')
    parser.add_argument('--url', required=True, help='URL the page was saved from')
    args = parser.parse_args()
    sys.exit(asyncio.run(run_probe(args.path, args.url)))
