"""
Feature flags for controlling system behavior.
"""

import os
import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)

_TRUTHY = ['on', 'true', '1']


class FeatureFlags:
    """Feature flags manager."""

    def __init__(self):
        self._flags = {}
        self._load_from_env()

    def _load_from_env(self) -> None:
        """Load feature flags from environment variables."""
        # Search flags
        self._flags['SEARCH_SYNONYMS'] = os.getenv('SEARCH_SYNONYMS', 'on').lower() in _TRUTHY
        self._flags['SEARCH_DEBUG_HEADERS'] = os.getenv('SEARCH_DEBUG_HEADERS', 'off').lower() in _TRUTHY

        # Cache flags
        self._flags['RESPONSE_CACHE'] = os.getenv('RESPONSE_CACHE', 'on').lower() in _TRUTHY

        logger.info(f"Feature flags loaded: {self._flags}")

    def is_enabled(self, flag_name: str) -> bool:
        """Check if a feature flag is enabled."""
        return self._flags.get(flag_name, False)

    def get_all_flags(self) -> Dict[str, Any]:
        """Get all feature flags."""
        return self._flags.copy()


# Global instance
_feature_flags = None


def get_feature_flags() -> FeatureFlags:
    """Get global feature flags instance."""
    global _feature_flags
    if _feature_flags is None:
        _feature_flags = FeatureFlags()
    return _feature_flags


def reset_feature_flags() -> None:
    """Reset global feature flags instance."""
    global _feature_flags
    _feature_flags = None


def is_synonym_search_enabled() -> bool:
    """Check if synonym expansion is applied to product search."""
    return get_feature_flags().is_enabled('SEARCH_SYNONYMS')


def is_response_cache_enabled() -> bool:
    """Check if cache-fronted reads are served from the response cache."""
    return get_feature_flags().is_enabled('RESPONSE_CACHE')


def is_search_debug_enabled() -> bool:
    """Check if search responses carry debug headers."""
    return get_feature_flags().is_enabled('SEARCH_DEBUG_HEADERS')
