# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - utils.py: Shared utilities (byte-size parsing, test module detection)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import is_test_module, parse_byte_size

__all__ = [
    "is_test_module",
    "parse_byte_size",
]
