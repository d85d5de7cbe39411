#!/usr/bin/env python3
"""
Import articles from a CSV / Excel / JSON file into the record store.

This script:
1. Loads the file and proposes a header -> field mapping
2. Transforms every row, skipping incomplete rows and duplicates
3. Saves accepted articles and new suppliers (unless --dry-run)
4. Shows progress with statistics
"""

import sys
from pathlib import Path

from tqdm import tqdm

from entity_resolution.config.config_loader import get_default_config
from entity_resolution.database.connection import check_connection, get_engine
from entity_resolution.database.models import create_all_tables
from entity_resolution.database.store import RecordStore
from entity_resolution.importing.loader import get_table_stats, load_table
from entity_resolution.importing.pipeline import import_articles
from entity_resolution.models.importing import SkipReason


def _parse_pairs(pairs: list[str] | None, option: str) -> dict:
    parsed = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"{option} expects FIELD=VALUE, got {pair!r}")
        field, value = pair.split("=", 1)
        parsed[field.strip()] = value.strip() or None
    return parsed


def run_import(
    file_path: str | Path,
    defaults: dict | None = None,
    overrides: dict | None = None,
    max_rows: int | None = None,
    dry_run: bool = False,
) -> dict:
    """
    Import an article file into the database.

    Args:
        file_path: Path to the article file
        defaults: Default value per target field
        overrides: Target field -> header corrections
        max_rows: Maximum number of rows to import (None = import all)
        dry_run: Only report what would be imported

    Returns:
        Dictionary with import statistics
    """
    config = get_default_config()

    print(f"📂 Loading articles from {file_path}...")
    try:
        headers, rows = load_table(file_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Failed to load file: {e}")
        return {"success": False, "error": str(e)}

    if max_rows is not None:
        rows = rows[:max_rows]
        print(f"🔢 Limited to first {len(rows)} rows")

    stats = get_table_stats(headers, rows)
    print(f"✅ Loaded {stats['total_rows']} rows, {stats['columns']} columns")

    print("🔌 Testing database connection...")
    engine = get_engine()
    if not check_connection(engine):
        print("❌ Database connection failed")
        return {"success": False, "error": "Database connection failed"}
    create_all_tables(engine)
    store = RecordStore(engine)

    result = import_articles(
        headers,
        tqdm(rows, desc="Importing", unit="row"),
        store_snapshot=store.snapshot(),
        config=config,
        defaults=defaults,
        overrides=overrides,
    )

    print("\n🧭 Field mapping:")
    for mapping in result.mapping.mappings:
        header = mapping.source_header or "-"
        print(f"   {mapping.target_field:<25} <- {header} ({mapping.confidence_score:.0f})")

    if result.missing_required:
        print(f"\n❌ Required fields neither mapped nor defaulted: {', '.join(result.missing_required)}")
        print("   Use --map FIELD=HEADER or --default FIELD=VALUE")
        return {"success": False, "error": "Missing required fields", "missing": result.missing_required}

    print(f"\n✅ {result.imported_count} articles accepted, {result.new_supplier_count} new suppliers")
    for reason in SkipReason:
        count = len(result.skipped_by_reason(reason))
        if count:
            print(f"   Skipped ({reason.value}): {count}")

    if dry_run:
        print("\n🧪 Dry run, nothing saved")
        return {"success": True, "imported": result.imported_count, "saved": False}

    print("\n💾 Saving to database...")
    saved = store.save(articles=result.articles, suppliers=result.new_suppliers)
    if not saved.success:
        print(f"❌ Save failed: {'; '.join(saved.errors)}")
        return {"success": False, "error": "; ".join(saved.errors)}

    print(f"✅ Inserted: {saved.inserted}  Updated: {saved.updated}")
    return {
        "success": True,
        "imported": result.imported_count,
        "skipped": result.skipped_count,
        "new_suppliers": result.new_supplier_count,
        "saved": True,
    }


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Import articles into the record store")
    parser.add_argument("--file", "-f", required=True, help="Path to CSV, Excel or JSON file")
    parser.add_argument(
        "--default",
        "-d",
        action="append",
        metavar="FIELD=VALUE",
        help="Default value for an unmapped field (repeatable)",
    )
    parser.add_argument(
        "--map",
        "-m",
        action="append",
        metavar="FIELD=HEADER",
        help="Map a field to a header; an empty header leaves the field unmapped (repeatable)",
    )
    parser.add_argument("--max-rows", "-n", type=int, default=None, help="Maximum number of rows")
    parser.add_argument("--dry-run", action="store_true", help="Do not write to the database")

    args = parser.parse_args()

    try:
        defaults = _parse_pairs(args.default, "--default")
        overrides = _parse_pairs(args.map, "--map")
    except ValueError as e:
        parser.error(str(e))

    try:
        result = run_import(
            args.file,
            defaults=defaults,
            overrides=overrides,
            max_rows=args.max_rows,
            dry_run=args.dry_run,
        )
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    if not result["success"]:
        sys.exit(1)
