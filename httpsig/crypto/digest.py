"""
Digest selection for RSA signatures.
"rsa-sha256", "RSA-SHA256" and "sha256" all select SHA-256.
"""
from enum import Enum

from cryptography.hazmat.primitives import hashes

from httpsig.crypto.errors import UnknownDigest

SUPPORTED_ALGORITHMS = ("rsa-sha1", "rsa-sha256", "rsa-sha512")


class DigestAlgorithm(Enum):
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    def hash(self) -> hashes.HashAlgorithm:
        """Return a fresh cryptography hash instance for this digest."""
        if self is DigestAlgorithm.SHA1:
            return hashes.SHA1()
        if self is DigestAlgorithm.SHA256:
            return hashes.SHA256()
        return hashes.SHA512()

    @property
    def algorithm_name(self) -> str:
        return f"rsa-{self.value}"

    @classmethod
    def from_name(cls, name) -> "DigestAlgorithm":
        """
        Match a free-form algorithm name against the supported digests.
        Matching is a lowercase substring test, sha1 first.
        """
        if isinstance(name, cls):
            return name
        if not name or not isinstance(name, str):
            raise UnknownDigest(f"Unsupported digest algorithm: {name!r}")
        lowered = name.lower()
        for member in (cls.SHA1, cls.SHA256, cls.SHA512):
            if member.value in lowered:
                return member
        raise UnknownDigest(f"Unsupported digest algorithm: {name!r}")
