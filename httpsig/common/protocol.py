"""Pydantic models: signing_context."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from httpsig.crypto.digest import DigestAlgorithm


# -------------------- SIGNING CONTEXT -------------------- #

class SigningContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: bytes                     # signing string, UTF-8 encoded
    algorithm: DigestAlgorithm
    key_id: Optional[str] = None    # passed to key resolvers

    @property
    def algorithm_name(self) -> str:
        return self.algorithm.algorithm_name
