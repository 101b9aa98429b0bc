#!/usr/bin/env python3
"""
Audit the synonym dictionary.
Usage: python -m apps.market.commands.audit_synonyms [--health] [--verbose]
"""

import argparse
import json
import sys
from typing import List, Optional, Tuple

from apps.market.services.synonyms import audit_synonyms, get_synonyms_health, load_synonym_dictionary


def _print_links(title: str, links: List[Tuple[str, str]], limit: int) -> None:
    print(f"\n{title}:")
    for key, value in links[:limit]:
        print(f"   - {key} -> {value}")
    if len(links) > limit:
        print(f"   ... and {len(links) - limit} more")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Audit the product synonym dictionary")
    parser.add_argument("--path", help="Dictionary file (defaults to settings.synonyms_path)")
    parser.add_argument("--health", action="store_true", help="Print health metrics as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="List asymmetric and dangling links")

    args = parser.parse_args(argv)

    if args.health:
        metrics = get_synonyms_health(load_synonym_dictionary(args.path) if args.path else None)
        print(json.dumps(metrics, indent=2, ensure_ascii=False))
        return 0 if metrics["is_healthy"] else 1

    result = audit_synonyms(load_synonym_dictionary(args.path))
    stats = result.stats

    print("Synonym dictionary audit:")
    print(f"   - Healthy: {'yes' if result.is_healthy else 'no'}")
    print(f"   - Entries: {stats['total_entries']}")
    print(f"   - Links: {stats['total_links']}")
    print(f"   - Phrase keys: {stats['phrase_keys']}")
    print(f"   - Categories: {', '.join(f'{k}={v}' for k, v in stats['categories'].items())}")
    print(f"   - One-way links: {stats['asymmetric_links']}")
    print(f"   - Values without an entry: {stats['dangling_links']}")

    if args.verbose:
        if result.asymmetric:
            _print_links("One-way links", result.asymmetric, 20)
        if result.dangling:
            _print_links("Values without an entry", result.dangling, 20)

    return 0 if result.is_healthy else 1


if __name__ == "__main__":
    sys.exit(main())
