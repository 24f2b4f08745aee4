#!/usr/bin/env python3
"""
Basic usage examples for gzlines.
"""

import gzip
import json
import logging
import os
import sys
import tempfile
from collections import Counter

from gzlines import (
    GzLinesConfig,
    all_gz_in_dir,
    lines_of_gz,
    multiplex_gz_dir,
    multiplex_gz_lines,
)
from gzlines.channels import select


def make_dataset(directory: str) -> None:
    """Write a few gzip-compressed JSON-lines files, plus one broken file."""
    for shard in range(3):
        path = os.path.join(directory, f"events-{shard}.jl.gz")
        with gzip.open(path, "wt", encoding="utf-8") as f:
            for i in range(1000):
                kind = "click" if i % 3 else "view"
                f.write(json.dumps({"shard": shard, "seq": i, "kind": kind}) + "\n")
    
    with open(os.path.join(directory, "corrupt.gz"), "wb") as f:
        f.write(b"this was never compressed\n")


def example_single_file(directory: str) -> None:
    """Example: stream one open file."""
    print("\n=== Single File Example ===")
    
    with open(os.path.join(directory, "events-0.jl.gz"), "rb") as f:
        lines, errors = lines_of_gz(f).collect()
    
    print(f"Read {len(lines)} lines, {len(errors)} errors")
    print(f"First record: {json.loads(lines[0])}")


def example_multiplex_directory(directory: str) -> None:
    """Example: every gzip file in a directory through one stream."""
    print("\n=== Multiplex Directory Example ===")
    
    print(f"Found: {[os.path.basename(p) for p in all_gz_in_dir(directory)]}")
    
    kinds = Counter()
    with multiplex_gz_dir(directory) as stream:
        for line, err in stream.events():
            if err is not None:
                print(f"Skipped file: {err}")
                continue
            kinds[json.loads(line)["kind"]] += 1
    
    print(f"Records by kind: {dict(kinds)}")


def example_manual_select(directory: str) -> None:
    """Example: select on the two channels yourself."""
    print("\n=== Manual Select Example ===")
    
    paths = [os.path.join(directory, f"events-{n}.jl.gz") for n in range(3)]
    stream = multiplex_gz_lines(*paths)
    
    pending = [stream.lines, stream.errors]
    total = 0
    while pending:
        channel, item, ok = select(*pending)
        if not ok:
            pending.remove(channel)
        elif channel is stream.lines:
            total += 1
        else:
            print(f"Error: {item}")
    
    print(f"Received {total} lines")


def example_stop_early(directory: str) -> None:
    """Example: stop reading early without leaking threads or files."""
    print("\n=== Stop Early Example ===")
    
    count = 0
    with multiplex_gz_dir(directory, patterns=["*.jl.gz"]) as stream:
        for line, err in stream.events():
            count += 1
            if count == 5:
                break
    
    print(f"Stopped after {count} events; producers finished: {stream.wait(timeout=5)}")


def example_long_lines(directory: str) -> None:
    """Example: raise the line limit for files with very long lines."""
    print("\n=== Long Lines Example ===")
    
    path = os.path.join(directory, "wide.gz")
    with gzip.open(path, "wb") as f:
        f.write(b"w" * (200 * 1024) + b"\n")
    
    lines, errors = multiplex_gz_lines(path, line_buffer_length_factor=1).collect()
    print(f"Factor 1: {len(lines)} lines, errors: {[str(e) for e in errors]}")
    
    saved = GzLinesConfig.get_instance().line_buffer_length_factor
    GzLinesConfig.set_defaults(line_buffer_length_factor=8)
    try:
        lines, errors = multiplex_gz_lines(path).collect()
    finally:
        GzLinesConfig.set_defaults(line_buffer_length_factor=saved)
    print(f"Factor 8: {len(lines)} lines of {len(lines[0])} bytes")
    os.remove(path)


def main():
    """Run all examples."""
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)
    print("gzlines Examples")
    print("=" * 50)
    
    with tempfile.TemporaryDirectory() as directory:
        make_dataset(directory)
        example_single_file(directory)
        example_multiplex_directory(directory)
        example_manual_select(directory)
        example_stop_early(directory)
        example_long_lines(directory)
    
    print("\n" + "=" * 50)
    print("All examples completed!")


if __name__ == "__main__":
    main()
