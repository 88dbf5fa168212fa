"""Cloudflare Turnstile verifier adapter."""

from __future__ import annotations

import logging

import httpx

from app.adapters.verifier.base import AbstractVerifier, VerificationResult
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


class TurnstileVerifier(AbstractVerifier):
    """Verifies tokens against the Turnstile siteverify endpoint.

    Uses a shared ``httpx.AsyncClient`` owned by the application lifespan.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        secret_key: str | None,
        verify_url: str = DEFAULT_VERIFY_URL,
        timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize the verifier.

        Args:
            client: Shared async HTTP client.
            secret_key: Turnstile secret key.
            verify_url: Siteverify endpoint.
            timeout_seconds: Request timeout in seconds.
        """
        self._client = client
        self._secret_key = secret_key or ""
        self._verify_url = verify_url
        self._timeout = timeout_seconds

    async def verify(self, token: str, remote_ip: str) -> VerificationResult:
        """Call siteverify and map the reply to a VerificationResult.

        Transport and decoding failures are logged and reported as a rejected
        verdict with the ``verification-failed`` error code.
        """
        form = {
            "secret": self._secret_key,
            "response": token,
            "remoteip": remote_ip,
        }
        try:
            response = await self._client.post(
                self._verify_url, data=form, timeout=self._timeout
            )
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("siteverify returned a non-object payload")
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "verification.error",
                extra={
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                    "ip_hash": hash_identifier(remote_ip),
                },
            )
            return VerificationResult(accepted=False, error_codes=["verification-failed"])

        result = VerificationResult(
            accepted=bool(payload.get("success", False)),
            confidence_score=payload.get("score"),
            error_codes=list(payload.get("error-codes") or []),
        )
        logger.info(
            "verification.completed",
            extra={
                "accepted": result.accepted,
                "score": result.confidence_score,
                "error_codes": result.error_codes,
                "ip_hash": hash_identifier(remote_ip),
            },
        )
        return result
