"""
Bot-Prevention Challenge Verification

Server-side verification of Cloudflare Turnstile tokens.

Policy:
- No secret configured: verification passes (challenge disabled)
- Secret configured, token missing: rejected without calling the provider
- Provider reports failure or is unreachable: rejected
"""

import logging
from dataclasses import dataclass

import httpx

from recruit.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class ChallengeResult:
    ok: bool
    reason: str | None = None


async def verify_challenge(
    token: str | None,
    remote_ip: str | None = None,
    *,
    secret: str | None = None,
    verify_url: str | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ChallengeResult:
    """
    Verify a challenge token with the provider.

    Args:
        token: Opaque token produced by the client-side widget
        remote_ip: Submitter address, forwarded to the provider when known
        secret: Override for the configured Turnstile secret
        verify_url: Override for the siteverify endpoint
        http_client: Optional client (injected in tests)

    Returns:
        ChallengeResult with ok=False and a reason when verification fails
    """
    secret = secret if secret is not None else settings.turnstile_secret
    if not secret:
        logger.warning("TURNSTILE_SECRET not set - skipping challenge verification")
        return ChallengeResult(ok=True)

    if not token:
        return ChallengeResult(ok=False, reason="missing token")

    payload = {"secret": secret, "response": token}
    if remote_ip and remote_ip != "unknown":
        payload["remoteip"] = remote_ip

    url = verify_url or settings.turnstile_verify_url

    try:
        if http_client is not None:
            response = await http_client.post(url, data=payload)
        else:
            async with httpx.AsyncClient(timeout=settings.turnstile_timeout_seconds) as client:
                response = await client.post(url, data=payload)
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Challenge verification request failed: {e}")
        return ChallengeResult(ok=False, reason="verification_unavailable")

    if not isinstance(data, dict):
        logger.error(f"Unexpected challenge provider response: {data!r}")
        return ChallengeResult(ok=False, reason="turnstile_failed")

    if data.get("success") is not True:
        error_codes = data.get("error-codes")
        if isinstance(error_codes, list) and error_codes:
            reason = ",".join(str(code) for code in error_codes)
        else:
            reason = "turnstile_failed"
        logger.info(f"Challenge rejected by provider: {reason}")
        return ChallengeResult(ok=False, reason=reason)

    return ChallengeResult(ok=True)
