"""Shared fixture domain for the test suite."""
