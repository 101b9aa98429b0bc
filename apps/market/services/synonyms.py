"""
Synonym dictionary for product search.

The dictionary is read once from ``config/synonyms.yml`` and is immutable
afterwards. Lookups are one-directional: a key yields its own list only.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from apps.core.config import settings

logger = logging.getLogger(__name__)


def normalize_term(term: Any) -> str:
    return str(term or "").strip().lower()


class SynonymDictionary:
    """Read-only term -> synonyms mapping grouped by category."""

    def __init__(self, categories: Mapping[str, Mapping[str, Iterable[str]]]):
        entries: Dict[str, Tuple[str, ...]] = {}
        category_of: Dict[str, str] = {}
        for category, terms in categories.items():
            for raw_key, raw_values in (terms or {}).items():
                key = normalize_term(raw_key)
                if not key:
                    continue
                values: List[str] = []
                for raw in raw_values or []:
                    value = normalize_term(raw)
                    if value and value != key and value not in values:
                        values.append(value)
                if key in entries:
                    logger.warning("Synonym key '%s' defined twice; keeping the %s entry", key, category_of[key])
                    continue
                entries[key] = tuple(values)
                category_of[key] = category
        self._entries = MappingProxyType(entries)
        self._categories = MappingProxyType(category_of)
        self._phrase_keys = tuple(key for key in entries if " " in key)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]], category: str = "default") -> "SynonymDictionary":
        return cls({category: mapping})

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, term: str) -> bool:
        return term in self._entries

    @property
    def entries(self) -> Mapping[str, Tuple[str, ...]]:
        return self._entries

    def lookup(self, term: str) -> Tuple[str, ...]:
        """Synonyms listed for ``term`` (already normalized); empty when unknown."""
        return self._entries.get(term, ())

    def phrase_keys(self) -> Tuple[str, ...]:
        """Keys made of more than one word."""
        return self._phrase_keys

    def categories(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for category in self._categories.values():
            counts[category] = counts.get(category, 0) + 1
        return counts


def load_synonym_dictionary(path: Optional[str] = None) -> SynonymDictionary:
    """Load the dictionary from YAML; a missing or unparsable file yields an empty dictionary."""
    config_path = Path(path or settings.synonyms_path)
    if not config_path.exists():
        logger.warning("%s not found, using empty synonyms", config_path)
        return SynonymDictionary({})

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        logger.warning("Error parsing %s: %s; using empty synonyms", config_path, exc)
        return SynonymDictionary({})

    if not isinstance(config, dict):
        raise ValueError(f"{config_path}: top level must be a mapping")

    categories = config.get('categories') or {}
    if not isinstance(categories, dict):
        raise ValueError(f"{config_path}: 'categories' must be a mapping")

    dictionary = SynonymDictionary(categories)
    logger.info("Loaded %d synonym entries from %s", len(dictionary), config_path)
    return dictionary


@lru_cache(maxsize=1)
def get_synonym_dictionary() -> SynonymDictionary:
    """Process-wide dictionary, loaded on first use."""
    return load_synonym_dictionary()


@dataclass
class AuditResult:
    """Outcome of a dictionary audit."""
    asymmetric: List[Tuple[str, str]]
    dangling: List[Tuple[str, str]]
    stats: Dict[str, Any]

    @property
    def is_healthy(self) -> bool:
        return self.stats["total_entries"] > 0


def audit_synonyms(dictionary: SynonymDictionary) -> AuditResult:
    """List one-way links and values that are not keys themselves.

    Search expands one hop only, so an asymmetric pair means a query for the
    value will not find products named after the key.
    """
    asymmetric: List[Tuple[str, str]] = []
    dangling: List[Tuple[str, str]] = []
    total_links = 0
    for key, values in dictionary.entries.items():
        for value in values:
            total_links += 1
            if value not in dictionary:
                dangling.append((key, value))
            elif key not in dictionary.lookup(value):
                asymmetric.append((key, value))

    return AuditResult(
        asymmetric=asymmetric,
        dangling=dangling,
        stats={
            "total_entries": len(dictionary),
            "total_links": total_links,
            "phrase_keys": len(dictionary.phrase_keys()),
            "categories": dictionary.categories(),
            "asymmetric_links": len(asymmetric),
            "dangling_links": len(dangling),
        },
    )


def get_synonyms_health(dictionary: Optional[SynonymDictionary] = None) -> Dict[str, Any]:
    """Audit metrics for the health endpoint; defaults to the process dictionary."""
    result = audit_synonyms(dictionary if dictionary is not None else get_synonym_dictionary())
    return {
        "is_healthy": result.is_healthy,
        **result.stats,
        "asymmetric_sample": [f"{a} -> {b}" for a, b in result.asymmetric[:10]],
    }
