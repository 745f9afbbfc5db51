"""Compact JWT header and payload extraction.

Only the header and payload are decoded; the signature is left to the caller supplied
verifier and is never checked here.
"""

from dataclasses import dataclass
import json
from typing import Callable, Optional, Tuple, TypeVar

from .encoding import b64url_decode
from .errors import MalformedToken, StatusListError

H = TypeVar("H")
P = TypeVar("P")


@dataclass(frozen=True)
class JwtHeader:
    """The JOSE header fields needed to accept a Status List Token."""

    alg: str
    typ: Optional[str] = None
    kid: Optional[str] = None

    @classmethod
    def load(cls, value: dict) -> "JwtHeader":
        """Parse the decoded JOSE header."""
        if not isinstance(value, dict):
            raise MalformedToken("JOSE header must be an object")

        alg = value.get("alg")
        if not isinstance(alg, str) or not alg.strip():
            raise MalformedToken("alg can't be blank")

        typ = value.get("typ")
        if typ is not None and not isinstance(typ, str):
            raise MalformedToken("typ must be str")

        kid = value.get("kid")
        if kid is not None and not isinstance(kid, str):
            raise MalformedToken("kid must be str")

        return cls(alg=alg, typ=typ, kid=kid)


def jwt_parts(token: str) -> Tuple[str, str, str]:
    """Split a compact JWT into its header, payload and signature parts."""
    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedToken(f"JWT must contain 3 parts, found {len(parts)}")

    header, payload, signature = parts
    if not header or not payload:
        raise MalformedToken("JWT header and payload must not be empty")

    return header, payload, signature


def _decode_part(part: str) -> dict:
    try:
        return json.loads(b64url_decode(part))
    except (StatusListError, ValueError) as err:
        raise MalformedToken(f"Unable to decode JWT part: {err}") from err


def parse_jwt(
    token: str,
    header_loader: Callable[[dict], H],
    payload_loader: Callable[[dict], P],
) -> Tuple[H, P]:
    """Decode header and payload of a compact JWT into caller specified types.

    Args:
        token: REQUIRED. The compact serialized JWT.

        header_loader: REQUIRED. Maps the decoded JOSE header to the desired type.

        payload_loader: REQUIRED. Maps the decoded claims to the desired type.

    Returns:
        Tuple of the loaded header and payload.
    """
    if isinstance(token, bytes):
        try:
            token = token.decode()
        except UnicodeDecodeError as err:
            raise MalformedToken("JWT must be valid UTF-8") from err
    if not isinstance(token, str):
        raise MalformedToken("JWT must be a string")

    header_part, payload_part, _ = jwt_parts(token.strip())
    header = _decode_part(header_part)
    payload = _decode_part(payload_part)

    try:
        return header_loader(header), payload_loader(payload)
    except MalformedToken:
        raise
    except (StatusListError, ValueError, TypeError, KeyError) as err:
        raise MalformedToken(f"Invalid JWT contents: {err}") from err
