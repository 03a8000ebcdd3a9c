"""
RSA PKCS#1 v1.5 sign/verify of a signing string with cryptography.
Implements the rsa-sha1, rsa-sha256 and rsa-sha512 algorithms.
"""
import binascii
import logging
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import padding

from httpsig.common.protocol import SigningContext
from httpsig.common.utils import b64d, b64e
from httpsig.config import load_settings
from httpsig.crypto.digest import DigestAlgorithm
from httpsig.crypto.errors import (
    MissingData, MissingSignature, SignatureError, VerificationError,
)
from httpsig.crypto.keys import (
    KeyCache, KeyResolver, KeyRole, coerce_key, resolve_key,
)

logger = logging.getLogger(__name__)


class RSASignatureMethod:
    """
    Signs or verifies one signing string with an RSA key.

    Keys come either inline (key object or PEM) or from a resolver called
    with key_id. An inline key always wins over a resolver. Resolved keys
    are parsed again on every call unless a KeyCache is passed in.
    The signing context is frozen once built.
    """

    def __init__(self, data, algorithm="rsa-sha256", *,
                 private_key=None,
                 public_key=None,
                 key_id: Optional[str] = None,
                 private_key_resolver: Optional[KeyResolver] = None,
                 public_key_resolver: Optional[KeyResolver] = None,
                 key_cache: Optional[KeyCache] = None):
        if data is None:
            data = b""
        elif isinstance(data, str):
            data = data.encode("utf-8")
        elif isinstance(data, (bytes, bytearray)):
            data = bytes(data)
        else:
            raise TypeError(f"data must be str or bytes, got {type(data).__name__}")

        digest = DigestAlgorithm.from_name(algorithm)

        if private_key_resolver is not None and not callable(private_key_resolver):
            raise TypeError("'private_key_resolver' expects a callable")
        if public_key_resolver is not None and not callable(public_key_resolver):
            raise TypeError("'public_key_resolver' expects a callable")

        if private_key is not None:
            private_key = coerce_key(private_key, KeyRole.PRIVATE)
        if public_key is not None:
            public_key = coerce_key(public_key, KeyRole.PUBLIC)

        self._context = SigningContext(data=data, algorithm=digest, key_id=key_id)
        self._private_key = private_key
        self._public_key = public_key
        self._private_key_resolver = private_key_resolver
        self._public_key_resolver = public_key_resolver
        self._key_cache = key_cache

    def __repr__(self):
        return (f"{type(self).__name__}(algorithm={self.algorithm.algorithm_name!r}, "
                f"key_id={self.key_id!r}, sign_source={self.sign_source!r}, "
                f"verify_source={self.verify_source!r})")

    # -------------------- Read-only view -------------------- #

    @property
    def context(self) -> SigningContext:
        return self._context

    @property
    def data(self) -> bytes:
        return self._context.data

    @property
    def algorithm(self) -> DigestAlgorithm:
        return self._context.algorithm

    @property
    def key_id(self) -> Optional[str]:
        return self._context.key_id

    @staticmethod
    def _source(key, resolver) -> Optional[str]:
        if key is not None:
            return "inline"
        if resolver is not None:
            return "resolver"
        return None

    @property
    def sign_source(self) -> Optional[str]:
        """Where sign() gets its key: 'inline', 'resolver' or None."""
        return self._source(self._private_key, self._private_key_resolver)

    @property
    def verify_source(self) -> Optional[str]:
        """Where verify() gets its key: 'inline', 'resolver' or None."""
        return self._source(self._public_key, self._public_key_resolver)

    # -------------------- Operations -------------------- #

    def sign(self) -> str:
        """Return the base64 signature of the signing string (no line breaks)."""
        ctx = self._context
        if not ctx.data:
            raise MissingData("Nothing to sign: the signing string is empty")

        key = resolve_key(KeyRole.PRIVATE, self._private_key, self._private_key_resolver,
                          ctx.key_id, self._key_cache)
        logger.debug("Signing %d bytes with %s (key_id=%s)", len(ctx.data), ctx.algorithm_name, ctx.key_id)
        try:
            raw = key.sign(ctx.data, padding.PKCS1v15(), ctx.algorithm.hash())
        except ValueError as e:
            raise SignatureError(f"RSA signing failed ({e})") from e
        return b64e(raw)

    def verify(self, signature) -> bool:
        """
        Check a base64 signature against the signing string.
        Returns False when the signature does not match; raises
        VerificationError when it is not valid base64.
        """
        if not signature:
            raise MissingSignature("Nothing to verify: the signature is empty")
        if not isinstance(signature, (str, bytes)):
            raise VerificationError(f"Signature must be base64 text, got {type(signature).__name__}")
        ctx = self._context
        if not ctx.data:
            raise MissingData("Nothing to verify: the signing string is empty")

        key = resolve_key(KeyRole.PUBLIC, self._public_key, self._public_key_resolver,
                          ctx.key_id, self._key_cache)
        try:
            raw = b64d(signature)
        except (binascii.Error, ValueError) as e:
            raise VerificationError(f"Signature is not valid base64 ({e})") from e

        logger.debug("Verifying %s signature (key_id=%s)", ctx.algorithm_name, ctx.key_id)
        try:
            key.verify(raw, ctx.data, padding.PKCS1v15(), ctx.algorithm.hash())
            return True
        except InvalidSignature:
            logger.warning("SIG FAIL: %s signature did not verify (key_id=%s)", ctx.algorithm_name, ctx.key_id)
            return False


# Convenience functions for one-shot use with keys on disk
def rsa_sign_b64(data, key_path: str = None, algorithm: str = None) -> str:
    """
    Sign data with the RSA private key at key_path and return base64.
    Defaults come from HTTPSIG_PRIVATE_KEY_PATH and HTTPSIG_ALGORITHM.
    """
    settings = load_settings()
    key_path = key_path or settings.private_key_path
    with open(key_path, "rb") as f:
        key_pem = f.read()
    return RSASignatureMethod(data, algorithm or settings.algorithm, private_key=key_pem).sign()


def rsa_verify_b64(data, sig_b64: str, key_path: str = None, algorithm: str = None) -> bool:
    """
    Verify a base64 signature with the public key (or certificate) at key_path.
    Defaults come from HTTPSIG_PUBLIC_KEY_PATH and HTTPSIG_ALGORITHM.
    """
    settings = load_settings()
    key_path = key_path or settings.public_key_path
    with open(key_path, "rb") as f:
        key_pem = f.read()
    return RSASignatureMethod(data, algorithm or settings.algorithm, public_key=key_pem).verify(sig_b64)
