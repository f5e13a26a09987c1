# Entity resolver for SmartStock
# Matches free-text store/product names against a catalog without any fuzzy scoring

import logging
from typing import Iterable, List, Optional

from .models import MatchCandidate, MatchKind, ResolutionOutcome, ResolutionStatus
from .normalizer import normalize, normalize_text

logger = logging.getLogger(__name__)


def _token_set_candidates(query_tokens, catalog, strip_punctuation) -> List[MatchCandidate]:
    """Phase A: every query token must appear in the entity's tokens."""
    result = []
    for entity in catalog:
        entity_tokens = normalize(entity.display_name, strip_punctuation)
        if query_tokens <= entity_tokens:
            result.append(MatchCandidate(entity, len(query_tokens), MatchKind.EXACT_TOKENSET))
    return result


def _substring_candidates(query_tokens, query_norm, catalog, strip_punctuation) -> List[MatchCandidate]:
    """Phase B: normalized query inside the normalized name, or the other way round."""
    result = []
    for entity in catalog:
        name_norm = normalize_text(entity.display_name, strip_punctuation)
        if not name_norm:
            continue
        if query_norm in name_norm or name_norm in query_norm:
            matched = len(query_tokens & set(name_norm.split()))
            result.append(MatchCandidate(entity, matched, MatchKind.SUBSTRING_FALLBACK))
    return result


def _outcome(query_text: str, candidates: List[MatchCandidate]) -> ResolutionOutcome:
    if not candidates:
        return ResolutionOutcome(ResolutionStatus.NOT_FOUND, query_text)
    if len(candidates) == 1:
        return ResolutionOutcome(ResolutionStatus.RESOLVED_SINGLE, query_text, candidates)
    return ResolutionOutcome(ResolutionStatus.RESOLVED_AMBIGUOUS, query_text, candidates)


def resolve(query_text: Optional[str], catalog: Iterable, strip_punctuation: bool = True) -> ResolutionOutcome:
    """
    Resolve `query_text` against entities exposing `display_name`.

    Strict token-set containment first; substring matching only when that
    finds nothing. Candidates keep catalog order, so the first one is the
    primary suggestion when the outcome is ambiguous.
    """
    query_norm = normalize_text(query_text, strip_punctuation)
    if not query_norm:
        return ResolutionOutcome(ResolutionStatus.NOT_REQUESTED, query_text or "")

    catalog = list(catalog)
    query_tokens = set(query_norm.split())

    candidates = _token_set_candidates(query_tokens, catalog, strip_punctuation)
    if not candidates:
        candidates = _substring_candidates(query_tokens, query_norm, catalog, strip_punctuation)

    outcome = _outcome(query_text, candidates)
    logger.debug("Resolved '%s' -> %s (%d candidates, %s)",
                 query_text, outcome.status.name, len(candidates),
                 candidates[0].match_kind.name if candidates else '-')
    return outcome


def resolve_product(query_text: Optional[str], items: Iterable, strip_punctuation: bool = True) -> ResolutionOutcome:
    """
    Resolve a product by name; when no name matches, try the SKU.

    SKUs only match whole: "op-1kg" finds OP-1KG, "op" finds nothing.
    """
    items = list(items)
    outcome = resolve(query_text, items, strip_punctuation)
    if outcome.status is not ResolutionStatus.NOT_FOUND:
        return outcome

    query_norm = normalize_text(query_text, strip_punctuation)
    token_count = len(query_norm.split())
    candidates = [MatchCandidate(item, token_count, MatchKind.EXACT_TOKENSET)
                  for item in items
                  if item.sku and normalize_text(item.sku, strip_punctuation) == query_norm]
    if candidates:
        logger.debug("'%s' matched by SKU (%d candidates)", query_text, len(candidates))
        return _outcome(query_text, candidates)
    return outcome
