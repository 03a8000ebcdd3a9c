"""Settings read from the environment (and a .env file if present)."""

import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    algorithm: str = "rsa-sha256"
    private_key_path: str = "keys/private_key.pem"
    public_key_path: str = "keys/public_key.pem"
    key_dir: str = "keys"


def load_settings() -> Settings:
    """Build Settings from HTTPSIG_* environment variables."""
    # Load environment variables from .env file if it exists
    load_dotenv(find_dotenv(usecwd=True))
    defaults = Settings()
    return Settings(
        algorithm=os.getenv("HTTPSIG_ALGORITHM", defaults.algorithm),
        private_key_path=os.getenv("HTTPSIG_PRIVATE_KEY_PATH", defaults.private_key_path),
        public_key_path=os.getenv("HTTPSIG_PUBLIC_KEY_PATH", defaults.public_key_path),
        key_dir=os.getenv("HTTPSIG_KEY_DIR", defaults.key_dir),
    )
