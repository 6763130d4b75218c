"""
Error taxonomy for generation backends.

Vendor SDKs raise their own exception hierarchies; `classify_provider_error`
folds them into the small set of errors the correction engine reasons about.
All of them are attempt failures: the failover chain retries or advances,
nothing here aborts a batch.
"""

import logging

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Generation Errors
# -----------------------------------------------------------------------------


class GenerationError(Exception):
    """Base class for a failed backend call."""

    pass


class LLMRateLimitError(GenerationError):
    """Raised when a backend returns a rate limit error."""

    pass


class LLMTimeoutError(GenerationError):
    """Raised when a backend call exceeds its timeout."""

    pass


class LLMServiceError(GenerationError):
    """Raised when a backend rejects or fails the request."""

    pass


class ProviderConfigError(Exception):
    """Raised when a provider cannot be constructed (unknown key, missing credentials)."""

    pass


class CorrectionAttemptError(Exception):
    """Raised inside an attempt when a response can't be parsed or fails validation."""

    pass


# Errors the failover chain treats as ordinary attempt failures
ATTEMPT_FAILURES = (GenerationError, CorrectionAttemptError)


_TIMEOUT_NAMES = ("timeout", "deadline")
_RATE_LIMIT_NAMES = ("ratelimit", "resourceexhausted", "toomanyrequests")


def classify_provider_error(exc: Exception, provider: str = "") -> GenerationError:
    """
    Map a vendor SDK exception onto the generation error taxonomy.

    Classification goes by exception class name so the SDKs stay optional
    imports: openai.APITimeoutError, anthropic.RateLimitError,
    google.api_core.exceptions.DeadlineExceeded, etc.

    Args:
        exc: Exception raised by the SDK call
        provider: Provider name for the error message

    Returns:
        A GenerationError subclass instance chained to `exc`
    """
    if isinstance(exc, GenerationError):
        return exc

    name = type(exc).__name__.lower()
    prefix = f"{provider}: " if provider else ""

    if isinstance(exc, TimeoutError) or any(token in name for token in _TIMEOUT_NAMES):
        error: GenerationError = LLMTimeoutError(f"{prefix}request timed out ({exc})")
    elif any(token in name for token in _RATE_LIMIT_NAMES):
        error = LLMRateLimitError(f"{prefix}rate limited ({exc})")
    else:
        error = LLMServiceError(f"{prefix}{exc}")

    error.__cause__ = exc
    return error
