"""Test suite for cineprompt.

Test Structure:
- unit/: Unit tests mirroring packages/cineprompt/core and cli
- conftest.py: Shared fixtures (parameters, settings, mock transport service)
"""
