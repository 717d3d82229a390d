"""
Tortilla Tests Package

Unit tests run against canned solc output and need no compiler:
   pytest tortilla/tests/ -v

Tests marked "solc" invoke a real solc binary and are skipped when none is
on PATH.
"""
