"""Test acquisition of Status List Tokens in JWT and CWT format."""

import asyncio
from datetime import datetime, timedelta

from cryptography.hazmat.primitives.asymmetric import ec
from google.auth.crypt.es256 import ES256Signer, ES256Verifier
import pytest

from token_status_verifier import (
    IGNORE_SIGNATURE,
    CwtSignatureVerifier,
    CwtStatusListTokenAcquirer,
    Expired,
    FetchFailed,
    FixedClock,
    InvalidArgument,
    InvalidSignature,
    JwtSignatureVerifier,
    JwtStatusListTokenAcquirer,
    MalformedToken,
    NotYetValid,
    StatusList,
    StatusListTokenFormat,
    SubjectMismatch,
    WrongMediaType,
)
from token_status_verifier.model import EXP, TTL
from token_status_verifier.token import StatusListTokenAcquirer

from tests import (
    ISSUED_AT,
    NOW,
    URI,
    cwt_claims,
    issue_cwt,
    issue_jwt,
    jwt_claims,
    trivial_verifier,
)

ES256_KEY = ec.generate_private_key(ec.SECP256R1())
OTHER_KEY = ec.generate_private_key(ec.SECP256R1())


class StaticFetcher:
    """Serve the same token for every uri."""

    def __init__(self, token):
        self.token = token
        self.calls = []

    async def __call__(self, uri, token_format, at=None):
        self.calls.append((uri, token_format, at))
        return self.token


class NaiveClock:
    def now(self):
        return datetime(2024, 6, 1)


class FailingFetcher:
    def __init__(self, error: BaseException):
        self.error = error

    async def __call__(self, uri, token_format, at=None):
        raise self.error


@pytest.fixture
def es256_signer():
    yield ES256Signer(ES256_KEY).sign


@pytest.fixture
def es256_verifier():
    yield ES256Verifier(ES256_KEY.public_key()).verify


def jwt_acquirer(token, verifier=IGNORE_SIGNATURE, **kwargs):
    return JwtStatusListTokenAcquirer(
        StaticFetcher(token), verifier, clock=FixedClock(NOW), **kwargs
    )


def cwt_acquirer(token, verifier=IGNORE_SIGNATURE, **kwargs):
    return CwtStatusListTokenAcquirer(
        StaticFetcher(token), verifier, clock=FixedClock(NOW), **kwargs
    )


@pytest.mark.asyncio
async def test_jwt_es256(es256_signer, es256_verifier):
    token = issue_jwt(jwt_claims(exp=NOW + timedelta(days=1)), signer=es256_signer)
    acquirer = jwt_acquirer(token, JwtSignatureVerifier(es256_verifier))

    claims = await acquirer(URI)

    assert claims.subject == URI
    assert claims.issued_at == ISSUED_AT
    assert claims.expiration_time == NOW + timedelta(days=1)
    assert claims.status_list == StatusList.from_b64(1, "eNrbuRgAAhcBXQ")
    assert acquirer.fetcher.calls == [(URI, StatusListTokenFormat.JWT, None)]


@pytest.mark.asyncio
async def test_jwt_signed_by_other_key(es256_verifier):
    token = issue_jwt(jwt_claims(), signer=ES256Signer(OTHER_KEY).sign)
    acquirer = jwt_acquirer(token, JwtSignatureVerifier(es256_verifier))

    with pytest.raises(InvalidSignature) as exc:
        await acquirer(URI)
    assert exc.value.uri == URI


@pytest.mark.asyncio
async def test_jwt_verifier_error_is_invalid_signature():
    class Rejecting:
        async def __call__(self, token, at):
            raise RuntimeError("unknown kid")

    with pytest.raises(InvalidSignature) as exc:
        await jwt_acquirer(issue_jwt(jwt_claims()), Rejecting())(URI)
    assert isinstance(exc.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_adapter_invalid_signature_not_wrapped_twice():
    acquirer = jwt_acquirer("a.b", JwtSignatureVerifier(trivial_verifier))

    with pytest.raises(InvalidSignature) as exc:
        await acquirer(URI)
    assert exc.value.uri == URI
    assert str(exc.value).startswith("Unable to verify JWT signature")
    assert str(exc.value).count("signature") == 1
    assert isinstance(exc.value.__cause__, MalformedToken)


@pytest.mark.asyncio
async def test_invalid_signature_with_uri_passed_through():
    error = InvalidSignature("Unknown key", "https://example.com/elsewhere")

    class Rejecting:
        async def __call__(self, token, at):
            raise error

    with pytest.raises(InvalidSignature) as exc:
        await jwt_acquirer(issue_jwt(jwt_claims()), Rejecting())(URI)
    assert exc.value is error


@pytest.mark.asyncio
async def test_naive_clock_read_as_utc():
    seen = []

    class Recording:
        async def __call__(self, token, at):
            seen.append(at)

    acquirer = JwtStatusListTokenAcquirer(
        StaticFetcher(issue_jwt(jwt_claims(exp=NOW + timedelta(days=1)))),
        Recording(),
        clock=NaiveClock(),
    )

    claims = await acquirer(URI)
    assert claims.subject == URI
    assert seen == [NOW]


@pytest.mark.asyncio
async def test_naive_clock_still_validates():
    acquirer = JwtStatusListTokenAcquirer(
        StaticFetcher(issue_jwt(jwt_claims(exp=NOW - timedelta(days=1)))),
        IGNORE_SIGNATURE,
        clock=NaiveClock(),
    )
    with pytest.raises(Expired):
        await acquirer(URI)


def test_incomplete_acquirer_cannot_be_constructed():
    class NoMediaTypeCheck(StatusListTokenAcquirer):
        token_format = StatusListTokenFormat.JWT

        def parse(self, token):
            return JwtStatusListTokenAcquirer.parse(self, token)

    with pytest.raises(TypeError):
        NoMediaTypeCheck(StaticFetcher("a.b.c"), IGNORE_SIGNATURE)


@pytest.mark.asyncio
async def test_signature_verified_at_validation_time():
    seen = []

    class Recording:
        async def __call__(self, token, at):
            seen.append((token, at))

    token = issue_jwt(jwt_claims())
    await jwt_acquirer(token, Recording())(URI)
    await jwt_acquirer(token, Recording())(URI, at=NOW - timedelta(days=1))
    assert seen == [(token, NOW), (token, NOW - timedelta(days=1))]


@pytest.mark.asyncio
async def test_jwt_at_time_forwarded():
    at = ISSUED_AT + timedelta(hours=1)
    acquirer = jwt_acquirer(issue_jwt(jwt_claims()))

    await acquirer(URI, at=at)
    assert acquirer.fetcher.calls == [(URI, StatusListTokenFormat.JWT, at)]


@pytest.mark.asyncio
async def test_jwt_at_time_before_issuance():
    acquirer = jwt_acquirer(issue_jwt(jwt_claims()))
    with pytest.raises(NotYetValid):
        await acquirer(URI, at=ISSUED_AT - timedelta(seconds=1))


@pytest.mark.asyncio
async def test_jwt_clock_skew():
    token = issue_jwt(jwt_claims(iat=NOW + timedelta(seconds=30)))
    with pytest.raises(NotYetValid):
        await jwt_acquirer(token)(URI)
    claims = await jwt_acquirer(token, allowed_clock_skew=timedelta(seconds=30))(URI)
    assert claims.issued_at == NOW + timedelta(seconds=30)


def test_negative_clock_skew():
    with pytest.raises(InvalidArgument):
        jwt_acquirer("a.b.c", allowed_clock_skew=timedelta(seconds=-1))
    with pytest.raises(InvalidArgument):
        cwt_acquirer(b"", allowed_clock_skew=timedelta(seconds=-1))


@pytest.mark.asyncio
@pytest.mark.parametrize("typ", ("JWT", "statuslist+cwt", None))
async def test_jwt_wrong_media_type(typ):
    acquirer = jwt_acquirer(issue_jwt(jwt_claims(), typ=typ))
    with pytest.raises(WrongMediaType) as exc:
        await acquirer(URI)
    assert exc.value.expected == "statuslist+jwt"
    assert exc.value.actual == typ


@pytest.mark.asyncio
async def test_jwt_full_media_type():
    acquirer = jwt_acquirer(issue_jwt(jwt_claims(), typ="application/statuslist+jwt"))
    assert (await acquirer(URI)).subject == URI


@pytest.mark.asyncio
async def test_jwt_subject_mismatch():
    acquirer = jwt_acquirer(issue_jwt(jwt_claims(sub="https://example.com/other")))
    with pytest.raises(SubjectMismatch):
        await acquirer(URI)


@pytest.mark.asyncio
async def test_jwt_expired():
    acquirer = jwt_acquirer(issue_jwt(jwt_claims(exp=NOW - timedelta(seconds=1))))
    with pytest.raises(Expired):
        await acquirer(URI)


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ("a.b", "not a token", "e30.e30.sig"))
async def test_jwt_malformed(token):
    with pytest.raises(MalformedToken):
        await jwt_acquirer(token)(URI)


@pytest.mark.asyncio
async def test_fetch_failure_wrapped():
    acquirer = JwtStatusListTokenAcquirer(
        FailingFetcher(OSError("unreachable")), IGNORE_SIGNATURE
    )
    with pytest.raises(FetchFailed) as exc:
        await acquirer(URI)
    assert exc.value.uri == URI
    assert isinstance(exc.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_fetch_failure_passed_through():
    error = FetchFailed(URI, "Got status 404", 404)
    acquirer = JwtStatusListTokenAcquirer(FailingFetcher(error), IGNORE_SIGNATURE)
    with pytest.raises(FetchFailed) as exc:
        await acquirer(URI)
    assert exc.value is error


@pytest.mark.asyncio
async def test_cancellation_is_not_wrapped():
    acquirer = JwtStatusListTokenAcquirer(
        FailingFetcher(asyncio.CancelledError()), IGNORE_SIGNATURE
    )
    with pytest.raises(asyncio.CancelledError):
        await acquirer(URI)


@pytest.mark.asyncio
async def test_cancel_while_verifying():
    started = asyncio.Event()

    class Hanging:
        async def __call__(self, token, at):
            started.set()
            await asyncio.Event().wait()

    task = asyncio.create_task(jwt_acquirer(issue_jwt(jwt_claims()), Hanging())(URI))
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_cwt_es256(es256_signer, es256_verifier):
    token = issue_cwt(cwt_claims(), signer=es256_signer)
    acquirer = cwt_acquirer(token, CwtSignatureVerifier(es256_verifier))

    claims = await acquirer(URI)

    assert claims.subject == URI
    assert claims.issued_at == ISSUED_AT
    assert claims.expiration_time is None
    assert claims.status_list == StatusList.from_b64(1, "eNrbuRgAAhcBXQ")
    assert acquirer.fetcher.calls == [(URI, StatusListTokenFormat.CWT, None)]


@pytest.mark.asyncio
async def test_cwt_signed_by_other_key(es256_verifier):
    token = issue_cwt(cwt_claims(), signer=ES256Signer(OTHER_KEY).sign)
    with pytest.raises(InvalidSignature):
        await cwt_acquirer(token, CwtSignatureVerifier(es256_verifier))(URI)


@pytest.mark.asyncio
async def test_cwt_embedded_status_list():
    token = issue_cwt(cwt_claims(embed_status_list=True))
    claims = await cwt_acquirer(token, CwtSignatureVerifier(trivial_verifier))(URI)
    assert claims.status_list.to_b64() == "eNrbuRgAAhcBXQ"


@pytest.mark.asyncio
@pytest.mark.parametrize("typ", ("statuslist+jwt", 16, None))
async def test_cwt_wrong_media_type(typ):
    with pytest.raises(WrongMediaType):
        await cwt_acquirer(issue_cwt(cwt_claims(), typ=typ))(URI)


@pytest.mark.asyncio
async def test_cwt_wrong_tag():
    with pytest.raises(MalformedToken):
        await cwt_acquirer(issue_cwt(cwt_claims(), tag=98))(URI)


@pytest.mark.asyncio
async def test_cwt_text_token():
    with pytest.raises(MalformedToken):
        await cwt_acquirer("d28443a10126")(URI)


@pytest.mark.asyncio
async def test_cwt_expired():
    payload = cwt_claims()
    payload[EXP] = int((NOW - timedelta(days=1)).timestamp())
    with pytest.raises(Expired):
        await cwt_acquirer(issue_cwt(payload))(URI)


@pytest.mark.asyncio
async def test_cwt_subject_mismatch():
    token = issue_cwt(cwt_claims(sub="https://example.com/other"))
    with pytest.raises(SubjectMismatch):
        await cwt_acquirer(token)(URI)


@pytest.mark.asyncio
async def test_cwt_time_to_live():
    payload = cwt_claims()
    payload[TTL] = 600
    claims = await cwt_acquirer(issue_cwt(payload))(URI)
    assert claims.time_to_live.seconds == 600


@pytest.mark.asyncio
async def test_cwt_not_yet_valid():
    token = issue_cwt(cwt_claims(iat=NOW + timedelta(minutes=5)))
    with pytest.raises(NotYetValid):
        await cwt_acquirer(token)(URI)
