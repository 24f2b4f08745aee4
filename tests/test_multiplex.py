#!/usr/bin/env python3
"""
Tests for multiplexing many gzip files into one stream.
"""

import unittest
import tempfile
import shutil
import gzip
import os
from collections import Counter
import psutil
from gzlines import (
    multiplex_gz_lines, multiplex_gz_dir, OpenError, DecompressionInitError,
    LineTooLongError, GzLinesConfig
)


class TestMultiplex(unittest.TestCase):
    """Test fan-in of per-file line streams."""
    
    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.process = psutil.Process()
    
    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)
    
    def write_gz(self, name, lines):
        path = os.path.join(self.temp_dir, name)
        with gzip.open(path, "wb") as f:
            for line in lines:
                f.write(line + b"\n")
        return path
    
    def write_raw(self, name, data):
        path = os.path.join(self.temp_dir, name)
        with open(path, "wb") as f:
            f.write(data)
        return path
    
    def open_paths(self):
        return {os.path.realpath(f.path) for f in self.process.open_files()}
    
    def assertNoneOpen(self, *paths):
        still_open = self.open_paths() & {os.path.realpath(p) for p in paths}
        self.assertEqual(still_open, set())
    
    def test_two_files(self):
        """Test a.gz (x, y) and b.gz (z) give exactly {x, y, z}."""
        a = self.write_gz("a.gz", [b"x", b"y"])
        b = self.write_gz("b.gz", [b"z"])
        stream = multiplex_gz_lines(a, b)
        
        received = []
        for line, err in stream.events():
            self.assertIsNone(err)
            received.append(line)
        
        self.assertEqual(Counter(received), Counter([b"x", b"y", b"z"]))
        self.assertTrue(stream.lines.closed)
        self.assertTrue(stream.errors.closed)
    
    def test_sum_of_lines_and_order_within_file(self):
        """Test all lines of F files arrive, each file in its own order."""
        counts = {"f0.gz": 300, "f1.gz": 1, "f2.gz": 1200, "f3.gz": 0}
        paths = [
            self.write_gz(name, [f"{name}:{i}".encode() for i in range(n)])
            for name, n in counts.items()
        ]
        stream = multiplex_gz_lines(*paths)
        
        lines, errors = stream.collect()
        
        self.assertEqual(errors, [])
        self.assertEqual(len(lines), sum(counts.values()))
        for name, n in counts.items():
            own = [line for line in lines if line.startswith(name.encode() + b":")]
            self.assertEqual(own, [f"{name}:{i}".encode() for i in range(n)])
        self.assertTrue(stream.wait(timeout=5))
        self.assertNoneOpen(*paths)
    
    def test_no_paths(self):
        """Test an empty path list closes both channels right away."""
        stream = multiplex_gz_lines()
        
        self.assertEqual(stream.collect(), ([], []))
        self.assertTrue(stream.wait(timeout=5))
    
    def test_missing_path_raises_and_closes_opened(self):
        """Test an unopenable path raises OpenError and leaks nothing."""
        good = self.write_gz("good.gz", [b"x"])
        missing = os.path.join(self.temp_dir, "missing.gz")
        
        with self.assertRaises(OpenError) as ctx:
            multiplex_gz_lines(good, missing)
        
        self.assertEqual(ctx.exception.path, missing)
        self.assertIsInstance(ctx.exception.__cause__, FileNotFoundError)
        self.assertNoneOpen(good)
    
    def test_bad_header_is_isolated(self):
        """Test one non-gzip file gives one error while others are delivered."""
        a = self.write_gz("a.gz", [b"x", b"y"])
        bad = self.write_raw("bad.gz", b"definitely not gzip\n")
        b = self.write_gz("b.gz", [b"z"])
        stream = multiplex_gz_lines(a, bad, b)
        
        lines, errors = stream.collect()
        
        self.assertEqual(sorted(lines), [b"x", b"y", b"z"])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], DecompressionInitError)
        self.assertEqual(errors[0].path, bad)
        self.assertTrue(stream.wait(timeout=5))
        self.assertNoneOpen(a, bad, b)
    
    def test_streaming_error_is_isolated(self):
        """Test a long line in one file does not stop the others."""
        limit = GzLinesConfig.get_instance().max_scan_token_size
        good = self.write_gz("good.gz", [b"1", b"2", b"3"])
        long = self.write_gz("long.gz", [b"before", b"x" * (limit + 1), b"after"])
        stream = multiplex_gz_lines(good, long, line_buffer_length_factor=1)
        
        lines, errors = stream.collect()
        
        self.assertEqual(sorted(lines), [b"1", b"2", b"3", b"before"])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], LineTooLongError)
        self.assertEqual(errors[0].path, long)
    
    def test_close_early_releases_files(self):
        """Test closing before exhaustion stops producers and closes files."""
        paths = [
            self.write_gz(f"big{n}.gz", [f"{n}-{i}".encode() for i in range(20000)])
            for n in range(3)
        ]
        
        with multiplex_gz_lines(*paths) as stream:
            for count, (line, err) in enumerate(stream.events()):
                self.assertIsNone(err)
                if count == 10:
                    break
        
        self.assertTrue(stream.wait(timeout=5))
        self.assertNoneOpen(*paths)
    
    def test_multiplex_dir(self):
        """Test a whole directory is found and streamed."""
        self.write_gz("a.gz", [b"x", b"y"])
        self.write_gz("b.gzip", [b"z"])
        self.write_raw("readme.txt", b"ignored\n")
        
        lines, errors = multiplex_gz_dir(self.temp_dir).collect()
        
        self.assertEqual(sorted(lines), [b"x", b"y", b"z"])
        self.assertEqual(errors, [])
    
    def test_invalid_factor_opens_nothing(self):
        """Test a bad factor is rejected before any file is opened."""
        a = self.write_gz("a.gz", [b"x"])
        
        with self.assertRaises(ValueError):
            multiplex_gz_lines(a, line_buffer_length_factor=-1)
        self.assertNoneOpen(a)


if __name__ == "__main__":
    unittest.main()
