"""
xstack test suite
=================

This package contains tests for xstack.

Test Modules
------------
- test_models.py: Tests for Pydantic configuration models
- test_filters.py: Tests for template inclusion rules
- test_renderer.py: Tests for Jinja2 rendering and output naming
- test_walker.py: Tests for template tree materialization
- test_pipeline.py: Tests for install and format commands
- test_lifecycle.py: Tests for stages, cleanup and cancellation
- test_cli.py: Tests for command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Run specific module
    pytest tests/test_filters.py

    # Run specific test class
    pytest tests/test_lifecycle.py::TestCancellation
"""
