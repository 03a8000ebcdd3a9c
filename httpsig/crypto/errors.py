"""
Named failure conditions for signing and verification.
Callers branch on the class, not on the message.
"""


class SignatureError(ValueError):
    """Base class for every input/precondition failure."""


class MissingData(SignatureError):
    """No signing string to sign or verify."""


class MissingKey(SignatureError):
    """No key material and no resolver, or the resolver returned nothing."""


class KeyTypeMismatch(SignatureError):
    """A public key was given where a private key is required, or vice versa."""


class KeyParseError(SignatureError):
    """PEM input could not be turned into an RSA key of the expected role."""


class UnknownDigest(SignatureError):
    """The algorithm name matched none of sha1/sha256/sha512."""


class MissingSignature(SignatureError):
    """verify() was called with an empty signature."""


class VerificationError(SignatureError):
    """The signature argument is not valid base64."""
