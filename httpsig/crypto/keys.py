"""
RSA key material: PEM loading, role checks and deferred resolution.
Provides load_key(pem), coerce_key(key_or_pem, role), resolve_key(...)
"""
import logging
import os
import threading
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from httpsig.config import load_settings
from httpsig.crypto.errors import KeyParseError, KeyTypeMismatch, MissingKey

logger = logging.getLogger(__name__)

RSAKey = Union[rsa.RSAPrivateKey, rsa.RSAPublicKey]
KeyResolver = Callable[[Optional[str]], Union[str, bytes, None]]


class KeyRole(Enum):
    PRIVATE = "private"
    PUBLIC = "public"


def role_of(key) -> Optional[KeyRole]:
    """Return the role of an RSA key object, None for anything else."""
    if isinstance(key, rsa.RSAPrivateKey):
        return KeyRole.PRIVATE
    if isinstance(key, rsa.RSAPublicKey):
        return KeyRole.PUBLIC
    return None


# -------------------- PEM PARSING -------------------- #

def _begin_line(pem: bytes) -> bytes:
    """Return the first -----BEGIN line; text before it (Bag Attributes etc.) is skipped."""
    for line in pem.splitlines():
        if line.strip().startswith(b"-----BEGIN"):
            return line.strip()
    return b""


def load_key(pem) -> RSAKey:
    """
    Load an RSA key from PEM (string or bytes).
    The PEM header decides the parse: PUBLIC KEY / RSA PUBLIC KEY give a public
    key, CERTIFICATE gives the certificate's public key, anything else is
    tried as an unencrypted private key.
    """
    if isinstance(pem, str):
        pem = pem.encode()
    if not isinstance(pem, bytes) or not pem.strip():
        raise KeyParseError("Empty or non-textual PEM input")

    header = _begin_line(pem)
    try:
        if b"PUBLIC KEY" in header:
            key = serialization.load_pem_public_key(pem)
        elif b"CERTIFICATE" in header:
            key = x509.load_pem_x509_certificate(pem).public_key()
        else:
            key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError(f"Could not parse PEM key ({e})") from e

    if role_of(key) is None:
        raise KeyParseError(f"Not an RSA key: {type(key).__name__}")
    return key


def coerce_key(key_or_pem, role: KeyRole) -> RSAKey:
    """
    Accept an RSA key object or its PEM and check it has the required role.
    Raises KeyTypeMismatch when a private key is given where a public key
    is required, or the other way round.
    """
    if isinstance(key_or_pem, (str, bytes)):
        key = load_key(key_or_pem)
    else:
        key = key_or_pem

    actual = role_of(key)
    if actual is None:
        raise KeyTypeMismatch(f"Must be an RSA {role.value} key, got {type(key).__name__}")
    if actual is not role:
        raise KeyTypeMismatch(f"Must be an RSA {role.value} key, got a {actual.value} key")
    return key


def public_pem(key: RSAKey) -> bytes:
    """Return the SubjectPublicKeyInfo PEM of a private or public key."""
    if isinstance(key, rsa.RSAPrivateKey):
        key = key.public_key()
    return key.public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


# -------------------- OPT-IN CACHE -------------------- #

class KeyCache:
    """
    Parsed-key cache keyed by (role, key_id).
    Only used when handed to a signature method explicitly; call
    invalidate() after rotating a key behind the resolver.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._keys: Dict[Tuple[KeyRole, Optional[str]], RSAKey] = {}

    def get(self, role: KeyRole, key_id: Optional[str]) -> Optional[RSAKey]:
        with self._lock:
            return self._keys.get((role, key_id))

    def put(self, role: KeyRole, key_id: Optional[str], key: RSAKey):
        with self._lock:
            self._keys[(role, key_id)] = key

    def invalidate(self, key_id: Optional[str] = None):
        """Drop one key id (both roles), or everything when key_id is None."""
        with self._lock:
            if key_id is None:
                self._keys.clear()
                return
            for role in KeyRole:
                self._keys.pop((role, key_id), None)

    def __len__(self):
        with self._lock:
            return len(self._keys)


# -------------------- RESOLUTION -------------------- #

def resolve_key(role: KeyRole,
                key: Optional[RSAKey] = None,
                resolver: Optional[KeyResolver] = None,
                key_id: Optional[str] = None,
                cache: Optional[KeyCache] = None) -> RSAKey:
    """
    Return the key to use for one operation.
    An inline key wins over the resolver; the resolver is called at most once.
    """
    if key is not None:
        return key
    if resolver is None:
        raise MissingKey(f"No {role.value} key and no {role.value} key resolver configured")

    if cache is not None:
        cached = cache.get(role, key_id)
        if cached is not None:
            logger.debug("Using cached %s key for key_id=%s", role.value, key_id)
            return cached

    logger.debug("Resolving %s key for key_id=%s", role.value, key_id)
    pem = resolver(key_id)
    if not pem:
        raise MissingKey(f"Resolver returned no {role.value} key for key_id={key_id!r}")

    resolved = load_key(pem)
    if role_of(resolved) is not role:
        raise KeyParseError(
            f"Resolver returned a {role_of(resolved).value} key for key_id={key_id!r}, "
            f"expected a {role.value} key"
        )

    if cache is not None:
        cache.put(role, key_id, resolved)
    return resolved


def pem_file_resolver(directory: Optional[str] = None, suffix: str = ".pem") -> KeyResolver:
    """
    Build a resolver that reads <directory>/<key_id><suffix>.
    directory defaults to HTTPSIG_KEY_DIR (see httpsig.config).
    Key ids carrying path separators are refused.
    """
    if directory is None:
        directory = load_settings().key_dir

    def _resolve(key_id: Optional[str]) -> bytes:
        if not key_id or os.sep in key_id or "/" in key_id or key_id in (".", ".."):
            raise MissingKey(f"Invalid key id for file lookup: {key_id!r}")
        path = os.path.join(directory, f"{key_id}{suffix}")
        if not os.path.isfile(path):
            raise MissingKey(f"Key file not found at {path}")
        with open(path, "rb") as f:
            return f.read()

    return _resolve
