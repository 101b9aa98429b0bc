"""
Query term expansion with synonyms support
"""
import logging
from typing import List, Optional

from apps.core.config import settings
from apps.core.feature_flags import is_synonym_search_enabled
from apps.market.services.synonyms import SynonymDictionary, get_synonym_dictionary, normalize_term

logger = logging.getLogger(__name__)


class TermExpander:
    """Turns a raw search string into the terms used for substring matching.

    ``dictionary`` can be anything with ``lookup(term)`` and ``phrase_keys()``;
    the YAML-backed :class:`SynonymDictionary` is the default.
    """

    def __init__(self, dictionary: Optional[SynonymDictionary] = None, max_terms: Optional[int] = None):
        self.dictionary = dictionary if dictionary is not None else get_synonym_dictionary()
        self.max_terms = max_terms if max_terms is not None else settings.search_max_terms

    def expand(self, query: Optional[str], use_synonyms: bool = True) -> List[str]:
        """Expand ``query`` one hop through the dictionary.

        The result holds the normalized query, each of its tokens and the
        synonyms listed for each token or for any multi-word key contained in
        the query. Synonyms of synonyms are not followed. Order is insertion
        order and the list is cut at ``max_terms``; an empty query gives [].
        """
        clean = normalize_term(query)
        if not clean:
            return []

        terms = {clean: None}
        for token in clean.split():
            terms.setdefault(token)
            if use_synonyms:
                for synonym in self.dictionary.lookup(token):
                    terms.setdefault(synonym)

        if use_synonyms:
            for phrase in self.dictionary.phrase_keys():
                if phrase in clean:
                    for synonym in self.dictionary.lookup(phrase):
                        terms.setdefault(synonym)

        expanded = list(terms)
        if len(expanded) > self.max_terms:
            logger.debug("Expansion of '%s' cut from %d to %d terms", clean, len(expanded), self.max_terms)
            expanded = expanded[:self.max_terms]
        return expanded


def create_term_expander(dictionary: Optional[SynonymDictionary] = None, max_terms: Optional[int] = None) -> TermExpander:
    """Create term expander instance"""
    return TermExpander(dictionary, max_terms)


def expand_terms(query: Optional[str]) -> List[str]:
    """Expand ``query`` with the process dictionary, honoring the SEARCH_SYNONYMS flag."""
    return create_term_expander().expand(query, use_synonyms=is_synonym_search_enabled())
