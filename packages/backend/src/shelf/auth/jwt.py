"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The access token is short-lived (15min) and carries the user id and
email. Verification only needs the signing secret, never the
database, so every protected request is a pure computation. The
price is no server-side revocation: a token stays valid until exp.

Each token also carries a random "jti" so two tokens issued for the
same user in the same second are still distinct.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt.algorithms import HMACAlgorithm
from jwt.utils import base64url_decode

ACCESS_TOKEN_TYPE = "access"

_HMAC_HASHES = {
    "HS256": HMACAlgorithm.SHA256,
    "HS384": HMACAlgorithm.SHA384,
    "HS512": HMACAlgorithm.SHA512,
}


class TokenError(Exception):
    """Raised when token verification fails."""

    reason = "invalid"


class TokenExpiredError(TokenError):
    reason = "expired"


class InvalidSignatureError(TokenError):
    reason = "invalid_signature"


class MalformedTokenError(TokenError):
    reason = "malformed"


@dataclass(frozen=True)
class IssuedToken:
    """What the client receives after signup/signin."""

    access_token: str
    expires_in: int  # seconds
    token_type: str = "bearer"


@dataclass(frozen=True)
class TokenClaim:
    """Decoded, verified payload of an access token."""

    subject_id: str
    email: str
    expires_at: datetime
    token_id: Optional[str] = None


class TokenIssuer:
    """Signs and verifies HMAC access tokens with a symmetric secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(minutes=15),
        leeway_seconds: int = 0,
    ):
        if not secret:
            raise ValueError("token secret must not be empty")
        if algorithm not in _HMAC_HASHES:
            raise ValueError(f"unsupported token algorithm: {algorithm}")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._leeway = leeway_seconds
        self._mac = HMACAlgorithm(_HMAC_HASHES[algorithm])
        self._mac_key = self._mac.prepare_key(secret)

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(
        self,
        subject_id: str,
        email: str,
        ttl: Optional[timedelta] = None,
    ) -> IssuedToken:
        """Create a signed access token for an identity."""
        ttl = self._ttl if ttl is None else ttl
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "email": email,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + ttl,
            "jti": uuid.uuid4().hex,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(access_token=token, expires_in=int(ttl.total_seconds()))

    def verify(self, token: str) -> TokenClaim:
        """Verify and decode an access token.

        Returns the claim on success.
        Raises a TokenError subclass on failure.

        Learn: PyJWT parses the header before it checks the MAC, so a
        token with a flipped byte in its header or payload fails with a
        decode error instead of a signature error. Any rejection of a
        well-formed three-segment token is therefore re-checked against
        our own MAC (see _classify_rejection).
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                leeway=self._leeway,
                options={"require": ["sub", "email", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidSignatureError:
            raise InvalidSignatureError("Token signature mismatch")
        except jwt.InvalidTokenError as e:
            raise self._classify_rejection(token, e)

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise MalformedTokenError("Not an access token")

        return TokenClaim(
            subject_id=payload["sub"],
            email=payload["email"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            token_id=payload.get("jti"),
        )

    def _classify_rejection(self, token: str, error: jwt.InvalidTokenError) -> TokenError:
        """Tell a tampered token apart from one that is structurally broken.

        Malformed: not three segments, or a segment isn't base64url.
        Invalid signature: decodable segments whose MAC doesn't match.
        A token carrying our valid MAC that PyJWT still refuses (missing
        claim, bad claim type) is malformed.
        """
        segments = token.split(".")
        if len(segments) != 3:
            return MalformedTokenError(f"Invalid token: {error}")
        try:
            for segment in segments:
                base64url_decode(segment)
        except ValueError:  # binascii.Error, or non-ASCII input
            return MalformedTokenError(f"Invalid token: {error}")

        signing_input = f"{segments[0]}.{segments[1]}".encode()
        signature = base64url_decode(segments[2])
        if not self._mac.verify(signing_input, self._mac_key, signature):
            return InvalidSignatureError("Token signature mismatch")
        return MalformedTokenError(f"Invalid token: {error}")

