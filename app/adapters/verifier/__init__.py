"""Anti-abuse verification adapters."""

from app.adapters.verifier.base import AbstractVerifier, VerificationResult
from app.adapters.verifier.turnstile import TurnstileVerifier

__all__ = ["AbstractVerifier", "TurnstileVerifier", "VerificationResult"]
