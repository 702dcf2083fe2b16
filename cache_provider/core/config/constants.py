"""
Cache Constants and Enumerations

This module defines the constants shared by the key codec, the freshness
envelope and every cache backend.

Architectural Decision: Centralized constants for key layout
- Single source of truth for the key separator and reserved tokens
- Backends never hard-code suffixes or sentinels
- Type-safe enum for backend selection

Author: System Architect
Date: 2025-12-05
"""

from datetime import timedelta
from enum import Enum

# ============================================================================
# Key Layout
# ============================================================================

# prefix . static-keys... . type-tag . additional-keys...
KEY_SEPARATOR = "."

# Suffix appended to the additional keys to address the freshness envelope
METADATA_KEY = "MetaData"

# Callers may pass this token incidentally; it never contributes to a pattern
RESERVED_RESULT_TOKEN = "IResult"

WILDCARD = "*"

# Characters with special meaning in redis glob patterns
GLOB_SPECIAL_CHARACTERS = frozenset("*?[]^\\")


# ============================================================================
# Expiry
# ============================================================================

DEFAULT_EXPIRATION = timedelta(minutes=10)


# ============================================================================
# Redis
# ============================================================================

# Database selected by ``configure_target`` when none is given
DEFAULT_DATABASE_INSTANCE = 0

# Database selected by the bootstrap wiring when settings do not override it
WIRING_DATABASE_INSTANCE = 10

# COUNT hint for SCAN while collecting keys to invalidate
SCAN_BATCH_SIZE = 500

# Keys deleted per DEL round trip during pattern invalidation
DELETE_BATCH_SIZE = 100


# ============================================================================
# Backend Selection
# ============================================================================


class CacheBackendKind(str, Enum):
    """
    Closed set of cache backend variants.

    MEMORY: Process-local expiring map
    REDIS: Shared redis key-value store
    """

    MEMORY = "memory"
    REDIS = "redis"
