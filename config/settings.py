"""
Configuration settings - edit values directly here
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Provider settings - configure values below"""

    # ===================
    # Blockfrost
    # ===================
    blockfrost_url: str = "https://cardano-mainnet.blockfrost.io/api/v0"
    blockfrost_project_id: Optional[str] = None

    # ===================
    # Client
    # ===================
    client_version: str = "0.1.0"  # sent as User-Agent
    request_timeout: float = 30.0

    # ===================
    # Confirmation polling (seconds)
    # ===================
    await_tx_interval: float = 3.0
    await_tx_timeout: Optional[float] = None  # None = poll until confirmed or cancelled


# Global settings instance - import this
settings = Settings()
