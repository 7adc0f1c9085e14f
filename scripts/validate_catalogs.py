#!/usr/bin/env python3
"""Validation script for offer catalog JSON files.

Validates every catalogs/*.json file (or the paths given on the command line)
against the packaged catalog schema, then parses each offer record so
type-specific field errors are reported too.
Exits with error code if any invalid files are found.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import jsonschema

from offer_runtime.adapters.catalog.file_offer_catalog import load_catalog_schema
from offer_runtime.adapters.catalog.records import offer_from_record
from offer_runtime.application.errors import OfferValidationError


def find_repo_root() -> Path:
    """Find the repository root by looking for pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


def validate_catalog_file(file_path: Path, schema: dict) -> list[str]:
    """Validate one catalog file and return its errors."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        return [f"Invalid JSON: {e}"]

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        return [f"Validation error: {e.message}"]

    errors: list[str] = []
    seen: set[str] = set()
    for record in data.get("offers", []):
        offer_id = record.get("id")
        if offer_id in seen:
            errors.append(f"duplicate offer id {offer_id}")
        seen.add(offer_id)
        try:
            offer_from_record(record)
        except OfferValidationError as e:
            errors.extend(e.issues or [str(e)])
    return errors


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if args:
        files = [Path(arg) for arg in args]
    else:
        files = sorted((find_repo_root() / "catalogs").glob("*.json"))

    schema = load_catalog_schema()
    failures: list[str] = []
    for file_path in files:
        errors = validate_catalog_file(file_path, schema)
        if errors:
            failures.extend(f"{file_path}: {error}" for error in errors)
        else:
            print(f"✓ {file_path}")

    if failures:
        print("\nValidation errors:", file=sys.stderr)
        for failure in failures:
            print(f"  {failure}", file=sys.stderr)
        return 1

    print("\nAll catalogs validated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
