# services/faq_matcher.py
"""Lexical FAQ cache matcher used to skip generation for known questions"""
import logging
from typing import Iterable, List, Optional

from core.domain import FaqEntry
from utils.korean_text import tokenize
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


class FaqMatcher:
    """
    Picks the single approved FAQ entry whose question best overlaps the incoming one.

    Score = (candidate tokens found in the query) / (candidate token count),
    where "found" means substring containment in either direction. A candidate
    wins only with a score >= threshold that strictly beats the best so far,
    so on equal scores the earlier candidate is kept.
    """

    def __init__(
        self,
        threshold: float = settings.FAQ_MATCH_THRESHOLD,
        min_token_length: int = settings.FAQ_MIN_TOKEN_LENGTH,
    ):
        self.threshold = threshold
        self.min_token_length = min_token_length

    def tokenize(self, text: str) -> List[str]:
        return tokenize(text, self.min_token_length)

    @staticmethod
    def score(query_tokens: List[str], candidate_tokens: List[str]) -> float:
        """Fraction of candidate tokens that overlap some query token, in [0, 1]."""
        if not candidate_tokens:
            return 0.0
        matched = sum(
            1 for kw in candidate_tokens
            if any(qt in kw or kw in qt for qt in query_tokens)
        )
        return matched / len(candidate_tokens)

    def match(self, question: str, candidates: Iterable[FaqEntry]) -> Optional[FaqEntry]:
        approved = [faq for faq in candidates if faq.is_approved]
        if not approved:
            return None

        query_tokens = self.tokenize(question)
        if not query_tokens:
            return None

        best_match: Optional[FaqEntry] = None
        best_score = 0.0

        for faq in approved:
            faq_tokens = self.tokenize(faq.question)
            if not faq_tokens:
                continue

            score = self.score(query_tokens, faq_tokens)
            if score >= self.threshold and score > best_score:
                best_score = score
                best_match = faq

        if best_match is not None:
            logger.info(f"FAQ cache hit (score={best_score:.2f}): {best_match.question!r}")
        else:
            logger.debug(f"FAQ cache miss for {question!r} among {len(approved)} approved entries")
        return best_match
