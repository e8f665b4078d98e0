"""
ERTH SDK - Constants

Centralized configuration constants for the SDK.
"""

# =============================================================================
# Network
# =============================================================================

DEFAULT_LCD_URL = "https://lcd.erth.network"

# Bech32 human-readable prefix for account and contract addresses
ADDRESS_PREFIX = "secret"

# Account addresses are RIPEMD160(SHA256(pubkey))
ADDRESS_LENGTH = 20

# BIP-44 coin type registered for Secret Network
COIN_TYPE = 529
DERIVATION_PATH = "m/44h/529h/0h/0/{index}"


# =============================================================================
# Encryption
# =============================================================================

# Mainnet consensus IO public key (base64, x25519)
MAINNET_CONSENSUS_IO_PUBKEY = "UyAkgs8Z55YD2091/RjSnmdMH4yF9PKc5lWqjV78nS8="

# HKDF salt shared by every Secret Network client
HKDF_SALT = bytes.fromhex(
    "000000000000000000024bead8df69990852c202db0e0097c1a12ea637d7e96d"
)

# Domain separation prefix for the per-wallet encryption seed
ENCRYPTION_SEED_PREFIX = b"secretjs-encryption-seed"

NONCE_SIZE = 32
X25519_KEY_SIZE = 32
ENVELOPE_HEADER_SIZE = NONCE_SIZE + X25519_KEY_SIZE  # 64


# =============================================================================
# Transaction Fees
# =============================================================================

# One gas limit for every execute transaction, single or multi message
DEFAULT_GAS_LIMIT = 5_000_000
DEFAULT_FEE_AMOUNT = "100000"
DEFAULT_FEE_DENOM = "uscrt"


# =============================================================================
# Protobuf Type URLs
# =============================================================================

MSG_EXECUTE_CONTRACT_TYPE_URL = "/secret.compute.v1beta1.MsgExecuteContract"
SECP256K1_PUBKEY_TYPE_URL = "/cosmos.crypto.secp256k1.PubKey"

# cosmos.tx.signing.v1beta1.SignMode
SIGN_MODE_DIRECT = 1

BROADCAST_MODE_SYNC = "BROADCAST_MODE_SYNC"


# =============================================================================
# Confirmation Polling
# =============================================================================

CONFIRM_INITIAL_DELAY = 2.0    # seconds before the first lookup
CONFIRM_RETRY_DELAY = 3.0      # seconds between lookups
CONFIRM_MAX_RETRIES = 5
CONFIRM_TIMEOUT = 60.0         # overall wall-clock budget

REQUEST_TIMEOUT = 30


# =============================================================================
# LCD Endpoints
# =============================================================================

NODE_INFO_PATH = "/cosmos/base/tendermint/v1beta1/node_info"
ACCOUNT_PATH = "/cosmos/auth/v1beta1/accounts/{address}"
BROADCAST_PATH = "/cosmos/tx/v1beta1/txs"
TX_PATH = "/cosmos/tx/v1beta1/txs/{tx_hash}"
CODE_HASH_PATH = "/compute/v1beta1/code_hash/by_contract_address/{address}"
QUERY_PATH = "/compute/v1beta1/query/{address}"
