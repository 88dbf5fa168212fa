"""Verifier interface consumed by the intake pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class VerificationResult:
    """Verdict returned by an anti-abuse verifier.

    Attributes:
        accepted: Whether the token proved a legitimate caller.
        confidence_score: Optional provider score, stored as the spam score.
        error_codes: Provider error codes explaining a rejection.
    """

    accepted: bool
    confidence_score: float | None = None
    error_codes: list[str] = field(default_factory=list)


class AbstractVerifier(ABC):
    """Interface for anti-abuse token verifiers."""

    @abstractmethod
    async def verify(self, token: str, remote_ip: str) -> VerificationResult:
        """Verify token issued to the caller at remote_ip.

        Implementations must not raise for provider failures; they return a
        rejected verdict instead.
        """
        raise NotImplementedError
