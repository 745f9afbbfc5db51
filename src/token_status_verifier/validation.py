"""Checks applied to the claims of a Status List Token.

All checks are pure: they return the claims unchanged or raise.
"""

from datetime import datetime, timedelta

from .errors import Expired, InvalidArgument, NotYetValid, SubjectMismatch
from .model import StatusListTokenClaims

NO_SKEW = timedelta(0)


def ensure_clock_skew(allowed_clock_skew: timedelta) -> timedelta:
    """Return allowed_clock_skew, rejecting negative durations."""
    if not isinstance(allowed_clock_skew, timedelta):
        raise InvalidArgument("allowed_clock_skew must be a timedelta")
    if allowed_clock_skew < NO_SKEW:
        raise InvalidArgument("allowed_clock_skew must be >= 0")
    return allowed_clock_skew


def ensure_subject(
    claims: StatusListTokenClaims, expected_subject: str
) -> StatusListTokenClaims:
    if claims.subject != expected_subject:
        raise SubjectMismatch(expected_subject, claims.subject)
    return claims


def ensure_issued_before(
    claims: StatusListTokenClaims,
    validation_time: datetime,
    allowed_clock_skew: timedelta = NO_SKEW,
) -> StatusListTokenClaims:
    if claims.issued_at > validation_time + allowed_clock_skew:
        raise NotYetValid(claims.issued_at, validation_time, allowed_clock_skew)
    return claims


def ensure_not_expired(
    claims: StatusListTokenClaims,
    validation_time: datetime,
    allowed_clock_skew: timedelta = NO_SKEW,
) -> StatusListTokenClaims:
    """Tokens without `exp` never expire."""
    if (
        claims.expiration_time is not None
        and claims.expiration_time < validation_time - allowed_clock_skew
    ):
        raise Expired(claims.expiration_time, validation_time, allowed_clock_skew)
    return claims


def ensure_valid(
    claims: StatusListTokenClaims,
    expected_subject: str,
    validation_time: datetime,
    allowed_clock_skew: timedelta = NO_SKEW,
) -> StatusListTokenClaims:
    """Check subject, issuance and expiration, stopping at the first failure."""
    ensure_clock_skew(allowed_clock_skew)
    ensure_subject(claims, expected_subject)
    ensure_issued_before(claims, validation_time, allowed_clock_skew)
    ensure_not_expired(claims, validation_time, allowed_clock_skew)
    return claims
