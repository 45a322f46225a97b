"""Common type definitions for vfpipe.

This module provides type aliases for commonly used types across the package.
"""

from typing import Any, TypeAlias

# Options the provider hands back on each poll and expects to see again
ExecutionOptions: TypeAlias = dict[str, Any]
