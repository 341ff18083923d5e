"""
Openbook backup archive test suite.

This package contains:
- unit/: Unit tests (in-memory archive, no files)
- integration/: Integration tests (ZIP archives in a temporary directory)
"""
