#!/usr/bin/env python3
"""
Validate problem catalog JSON files.

Usage:
    python scripts/validate_problems.py --check           # report issues, exit 1 if any
    python scripts/validate_problems.py --check foo.json  # check a single file
"""

import json
import sys
from pathlib import Path

PROBLEMS_DIR = Path(__file__).parent.parent / "interviewer" / "problems"

_REQUIRED_FIELDS = {"id", "title", "difficulty", "category", "description",
                    "examples", "constraints"}

_VALID_DIFFICULTIES = {"Easy", "Medium", "Hard"}


def _issue(fname, field, kind, detail, index=None):
    return {"file": fname, "index": index, "field": field, "kind": kind, "detail": detail}


def validate_problem(data, filepath=None):
    """Validate a single problem dict. Returns list of issue dicts."""
    issues = []
    fname = Path(filepath).name if filepath else "<unknown>"

    if not isinstance(data, dict):
        return [_issue(fname, "<root>", "not_an_object", "Top-level JSON value must be an object")]

    for field in sorted(_REQUIRED_FIELDS):
        if field not in data:
            issues.append(_issue(fname, field, "missing_field", f"Required field '{field}' is missing"))

    if "difficulty" in data and data["difficulty"] not in _VALID_DIFFICULTIES:
        issues.append(_issue(
            fname, "difficulty", "invalid_difficulty",
            f"Difficulty '{data['difficulty']}' is not one of {sorted(_VALID_DIFFICULTIES)}",
        ))

    if filepath and data.get("id") and Path(filepath).stem != data["id"]:
        issues.append(_issue(
            fname, "id", "name_mismatch",
            f"id '{data['id']}' does not match file name '{Path(filepath).stem}'",
        ))

    for i, ex in enumerate(data.get("examples", []) or []):
        if not isinstance(ex, dict):
            issues.append(_issue(fname, "examples", "invalid_example", "Example must be an object", i))
            continue
        for key in ("input", "output"):
            if not isinstance(ex.get(key), str) or not ex[key].strip():
                issues.append(_issue(
                    fname, f"examples.{key}", "missing_field",
                    f"Example field '{key}' must be a non-empty string", i,
                ))

    constraints = data.get("constraints", [])
    if not isinstance(constraints, list) or not all(isinstance(c, str) for c in constraints):
        issues.append(_issue(fname, "constraints", "invalid_constraints", "Constraints must be a list of strings"))

    return issues


def validate_file(filepath):
    """Load and validate a single problem file. Returns issues list."""
    try:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        return [_issue(Path(filepath).name, "<root>", "invalid_json", str(exc))]
    return validate_problem(data, filepath)


def main(argv=None):
    import argparse
    parser = argparse.ArgumentParser(description="Validate problem catalog JSON files")
    parser.add_argument("--check", action="store_true", help="Report issues (exit 1 if any)")
    parser.add_argument("path", nargs="?", default=None,
                        help="Single file or directory (default: interviewer/problems/)")
    args = parser.parse_args(argv)

    if not args.check:
        parser.error("Specify --check")

    target = Path(args.path) if args.path else PROBLEMS_DIR
    if target.is_file():
        files = [target]
    elif target.is_dir():
        files = sorted(target.glob("*.json"))
    else:
        print(f"Error: {target} not found", file=sys.stderr)
        sys.exit(1)

    total_issues = 0
    files_affected = 0
    for fpath in files:
        issues = validate_file(fpath)
        if issues:
            files_affected += 1
            total_issues += len(issues)
            print(f"{fpath.name}: {len(issues)} issues")
            for iss in issues:
                loc = f"[{iss['index']}]" if iss["index"] is not None else ""
                print(f"  {iss['field']}{loc}: {iss['detail']}")

    print(f"\n{'='*50}")
    print(f"Files scanned: {len(files)}")
    print(f"Files with issues: {files_affected}")
    print(f"Total issues: {total_issues}")

    if total_issues > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
