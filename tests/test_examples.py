#!/usr/bin/env python3
"""
Smoke tests for the bundled usage examples.
"""

import unittest
import contextlib
import importlib.util
import io
import os
import shutil
import tempfile
from gzlines import GzLinesConfig

EXAMPLE = os.path.join(os.path.dirname(__file__), os.pardir, "examples", "basic_usage.py")


def load_example():
    spec = importlib.util.spec_from_file_location("basic_usage", EXAMPLE)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestBasicUsage(unittest.TestCase):
    """Test the example functions run cleanly."""
    
    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.example = load_example()
        self.out = io.StringIO()
    
    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)
    
    def test_stop_early_on_empty_directory(self):
        """Test stopping early works when there is nothing to read."""
        with contextlib.redirect_stdout(self.out):
            self.example.example_stop_early(self.temp_dir)
        
        self.assertIn("Stopped after 0 events", self.out.getvalue())
    
    def test_stop_early_with_data(self):
        """Test stopping early after a few events on a real dataset."""
        with contextlib.redirect_stdout(self.out):
            self.example.make_dataset(self.temp_dir)
            self.example.example_stop_early(self.temp_dir)
        
        self.assertIn("Stopped after 5 events; producers finished: True", self.out.getvalue())
    
    def test_long_lines_restores_factor(self):
        """Test the long-lines example leaves the global factor as it was."""
        before = GzLinesConfig.get_instance().line_buffer_length_factor
        
        with contextlib.redirect_stdout(self.out):
            self.example.example_long_lines(self.temp_dir)
        
        self.assertEqual(GzLinesConfig.get_instance().line_buffer_length_factor, before)
        self.assertIn("Factor 8: 1 lines", self.out.getvalue())


if __name__ == "__main__":
    unittest.main()
