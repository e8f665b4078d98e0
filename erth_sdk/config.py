"""
ERTH SDK - Configuration Management

Handles loading and managing SDK configuration.
Network constants that rotate (consensus IO key, fee market) are injected
here instead of being hardcoded in the components that use them.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .constants import (
    DEFAULT_LCD_URL,
    ADDRESS_PREFIX,
    MAINNET_CONSENSUS_IO_PUBKEY,
    DEFAULT_GAS_LIMIT,
    DEFAULT_FEE_AMOUNT,
    DEFAULT_FEE_DENOM,
    CONFIRM_INITIAL_DELAY,
    CONFIRM_RETRY_DELAY,
    CONFIRM_MAX_RETRIES,
    CONFIRM_TIMEOUT,
    REQUEST_TIMEOUT,
)
from .errors import ValidationError


@dataclass
class FeeConfig:
    """Flat fee attached to every transaction."""
    gas_limit: int = DEFAULT_GAS_LIMIT
    amount: str = DEFAULT_FEE_AMOUNT
    denom: str = DEFAULT_FEE_DENOM
    granter: Optional[str] = None
    
    def __post_init__(self):
        if self.gas_limit <= 0:
            raise ValidationError(f"gas_limit must be positive, got {self.gas_limit}")
        if not str(self.amount).isdigit():
            raise ValidationError(f"Fee amount must be an integer string, got {self.amount!r}")


@dataclass
class PollConfig:
    """Bounded retry budget for confirmation polling."""
    initial_delay: float = CONFIRM_INITIAL_DELAY
    retry_delay: float = CONFIRM_RETRY_DELAY
    max_retries: int = CONFIRM_MAX_RETRIES
    timeout: float = CONFIRM_TIMEOUT


@dataclass
class NetworkConfig:
    """
    Network configuration (PUBLIC).
    
    Contains no key material and is safe to commit or share.
    
    Example network_config.json:
    {
        "lcd_url": "https://lcd.erth.network",
        "chain_id": "secret-4",
        "consensus_io_pubkey": "UyAkgs8Z55YD2091/RjSnmdMH4yF9PKc5lWqjV78nS8=",
        "fee": {"gas_limit": 5000000, "amount": "100000", "denom": "uscrt"},
        "poll": {"initial_delay": 2, "retry_delay": 3, "max_retries": 5, "timeout": 60}
    }
    """
    lcd_url: str = DEFAULT_LCD_URL
    chain_id: Optional[str] = None  # fetched from node_info when None
    address_prefix: str = ADDRESS_PREFIX
    consensus_io_pubkey: str = MAINNET_CONSENSUS_IO_PUBKEY
    fee: FeeConfig = field(default_factory=FeeConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    request_timeout: float = REQUEST_TIMEOUT
    
    @classmethod
    def mainnet(cls) -> "NetworkConfig":
        return cls()
    
    @classmethod
    def from_dict(cls, data: dict) -> "NetworkConfig":
        fee = data.get("fee", {})
        poll = data.get("poll", {})
        return cls(
            lcd_url=data.get("lcd_url", DEFAULT_LCD_URL),
            chain_id=data.get("chain_id"),
            address_prefix=data.get("address_prefix", ADDRESS_PREFIX),
            consensus_io_pubkey=data.get("consensus_io_pubkey", MAINNET_CONSENSUS_IO_PUBKEY),
            fee=FeeConfig(
                gas_limit=int(fee.get("gas_limit", DEFAULT_GAS_LIMIT)),
                amount=str(fee.get("amount", DEFAULT_FEE_AMOUNT)),
                denom=fee.get("denom", DEFAULT_FEE_DENOM),
                granter=fee.get("granter")
            ),
            poll=PollConfig(
                initial_delay=float(poll.get("initial_delay", CONFIRM_INITIAL_DELAY)),
                retry_delay=float(poll.get("retry_delay", CONFIRM_RETRY_DELAY)),
                max_retries=int(poll.get("max_retries", CONFIRM_MAX_RETRIES)),
                timeout=float(poll.get("timeout", CONFIRM_TIMEOUT))
            ),
            request_timeout=float(data.get("request_timeout", REQUEST_TIMEOUT))
        )
    
    @classmethod
    def from_file(cls, path: str) -> "NetworkConfig":
        """
        Load network configuration from JSON file.
        
        The file should NOT contain mnemonics or private keys.
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        
        with open(config_path) as f:
            data = json.load(f)
        
        return cls.from_dict(data)
    
    @classmethod
    def from_env(cls, prefix: str = "ERTH_") -> "NetworkConfig":
        """
        Load configuration from environment variables.
        
        Recognised: {prefix}LCD_URL, {prefix}CHAIN_ID, {prefix}CONSENSUS_IO_PUBKEY,
        {prefix}GAS_LIMIT, {prefix}FEE_AMOUNT, {prefix}FEE_DENOM, {prefix}FEE_GRANTER.
        """
        env = os.environ
        data = {
            "lcd_url": env.get(f"{prefix}LCD_URL", DEFAULT_LCD_URL),
            "chain_id": env.get(f"{prefix}CHAIN_ID") or None,
            "consensus_io_pubkey": env.get(f"{prefix}CONSENSUS_IO_PUBKEY", MAINNET_CONSENSUS_IO_PUBKEY),
            "fee": {
                "gas_limit": env.get(f"{prefix}GAS_LIMIT", DEFAULT_GAS_LIMIT),
                "amount": env.get(f"{prefix}FEE_AMOUNT", DEFAULT_FEE_AMOUNT),
                "denom": env.get(f"{prefix}FEE_DENOM", DEFAULT_FEE_DENOM),
                "granter": env.get(f"{prefix}FEE_GRANTER") or None,
            },
        }
        return cls.from_dict(data)
