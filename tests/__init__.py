"""Test suite for cachevars.

Test Structure:
- unit/: Unit tests per subpackage (blocks, caching, codecs, config, io, utils)
- integration/: End-to-end caching workflows against a real temp directory
- conftest.py: Shared fixtures (engines, reporters, artifact locations)
"""
