"""
PKCE (Proof Key for Code Exchange) and random key utilities.

This module implements the RFC 7636 client side: code verifier generation,
S256 challenge derivation, and the random string generators used for the
anti-forgery state parameter.
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass
from typing import Optional

from .oauth_models import PKCEMethod


DEFAULT_KEY_LENGTH = 32
CODE_VERIFIER_KEY_LENGTH = 96
CODE_CHALLENGE_ALGORITHM = "sha256"


def _urlsafe_b64encode(data: bytes, padding: bool) -> str:
    encoded = base64.urlsafe_b64encode(data).decode('ascii')
    return encoded if padding else encoded.rstrip('=')


class Base64StringKeyGenerator:
    """
    Random key generator producing URL-safe base64 strings.

    Instances hold only immutable configuration and draw every key from the
    ``secrets`` module, so one instance can be shared between threads and
    concurrent requests.

    Args:
        key_length: Number of random bytes per key (at least 32)
        padding: Whether to keep trailing ``=`` padding characters
    """

    def __init__(self, key_length: int = DEFAULT_KEY_LENGTH, padding: bool = True):
        if key_length < DEFAULT_KEY_LENGTH:
            raise ValueError(
                f"key_length must be greater than or equal to {DEFAULT_KEY_LENGTH}"
            )
        self.key_length = key_length
        self.padding = padding

    def generate_key(self) -> str:
        """
        Generate a new random key.

        Returns:
            str: Base64url encoded key

        Example:
            state = Base64StringKeyGenerator().generate_key()
            # 32 bytes -> 44 characters including one '=' pad
        """
        return _urlsafe_b64encode(secrets.token_bytes(self.key_length), self.padding)


@dataclass(frozen=True)
class PKCEParameters:
    """Code verifier and the challenge sent in the authorization request.

    ``code_challenge_method`` is None when the challenge had to fall back to
    the plain transform.
    """

    code_verifier: str
    code_challenge: str
    code_challenge_method: Optional[str] = PKCEMethod.S256.value


class PKCEGenerator:
    """
    PKCE code verifier and challenge generator.

    Code verifiers are 96 random bytes, base64url encoded without padding
    (128 characters, the RFC 7636 maximum).
    """

    def __init__(self, verifier_generator: Optional[Base64StringKeyGenerator] = None):
        self.verifier_generator = verifier_generator or Base64StringKeyGenerator(
            CODE_VERIFIER_KEY_LENGTH, padding=False
        )

    def generate_code_verifier(self) -> str:
        """Generate a fresh code verifier."""
        return self.verifier_generator.generate_key()

    @staticmethod
    def create_code_challenge(verifier: str) -> str:
        """
        Derive the S256 code challenge for a verifier.

        Args:
            verifier: The PKCE code verifier

        Returns:
            str: base64url(SHA-256(ASCII(verifier))) without padding

        Raises:
            ValueError: If SHA-256 is unavailable in this runtime

        Example:
            PKCEGenerator.create_code_challenge(
                "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
            )
            # "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"
        """
        digest = hashlib.new(CODE_CHALLENGE_ALGORITHM, verifier.encode('ascii')).digest()
        return _urlsafe_b64encode(digest, padding=False)

    def generate_parameters(self) -> PKCEParameters:
        """
        Generate a verifier and its challenge.

        When SHA-256 cannot be instantiated the challenge degrades to the raw
        verifier and no challenge method is returned, which the authorization
        server treats as the "plain" transform. This keeps PKCE working on
        restricted runtimes and is not a recommended configuration.

        Returns:
            PKCEParameters: Verifier, challenge and challenge method
        """
        verifier = self.generate_code_verifier()
        try:
            challenge = self.create_code_challenge(verifier)
        except ValueError:
            return PKCEParameters(verifier, verifier, None)
        return PKCEParameters(verifier, challenge, PKCEMethod.S256.value)
