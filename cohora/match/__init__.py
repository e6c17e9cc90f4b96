"""Match service: the LLM decides who fits a query."""

from cohora.match.models import MatchResult, MatchServiceError
from cohora.match.service import MatchService

__all__ = ["MatchResult", "MatchService", "MatchServiceError"]
