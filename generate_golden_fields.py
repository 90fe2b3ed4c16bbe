#!/usr/bin/env python3
"""
Fill out_stdout, state and steps of a golden YAML record by running it.
Usage: python generate_golden_fields.py path/to/golden.yaml
"""

import os
import sys

import yaml

from program import run_source


def fill_record(doc):
    """Run the record's program and store the observed results under `expect`."""
    src = doc.get("in_source")
    if not src:
        raise ValueError("No 'in_source' found in record")

    out, rt = run_source(str(src), doc.get("in_stdin") or [], doc.get("config"))

    # prefer an existing expect/out block, create expect otherwise
    if "expect" in doc:
        target = doc["expect"]
    elif "out" in doc:
        target = doc["out"]
    else:
        doc["expect"] = {}
        target = doc["expect"]

    target["out_stdout"] = out
    target["state"] = "complete"
    target["steps"] = rt.steps
    return doc


def main(path):
    if not os.path.exists(path):
        print("File not found:", path)
        sys.exit(2)

    with open(path, "r", encoding="utf-8") as f:
        doc = yaml.safe_load(f) or {}

    try:
        fill_record(doc)
    except ValueError as e:
        print(e)
        sys.exit(2)

    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(doc, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    print(f"Updated {path} with out_stdout, state and steps.")

if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: generate_golden_fields.py path/to/golden.yaml")
        sys.exit(1)
    main(sys.argv[1])
