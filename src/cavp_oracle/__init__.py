"""
Оракул соответствия CAVP.

Экспортирует публичный API:
    encode_hex()      - hex-кодирование результатов
    resolve_cipher()  - идентификатор → CipherDescriptor
    resolve_aead()    - идентификатор → AEADDescriptor
    apply_cipher()    - один проход шифра без дополнения
    seal_aead()       - AEAD seal с разбором nonce | ciphertext | tag
    open_aead()       - AEAD open с проверкой тега и длины
    CipherOracle, AEADOracle - объектный интерфейс поверх запросов
    OracleError       - базовое исключение всех отказов

Пример:
    >>> from src.cavp_oracle import apply_cipher, encode_hex
    >>> encode_hex(apply_cipher("aes-128-ecb", "encrypt", bytes(16), b"", bytes(16)))
    '66e94bd4ef8a2c3b884cfa59ca342b2e'
"""

from src.cavp_oracle.api import apply_cipher, open_aead, seal_aead
from src.cavp_oracle.codec import encode_hex
from src.cavp_oracle.config import (
    DEFAULT_CONFIG,
    OracleConfig,
    OracleProfile,
    load_config,
)
from src.cavp_oracle.core.descriptors import (
    AEADDescriptor,
    AeadFamily,
    CipherDescriptor,
    CipherFamily,
    CipherMode,
    Direction,
)
from src.cavp_oracle.core.exceptions import (
    AlgorithmNotFoundError,
    AuthenticationFailureError,
    FailureKind,
    FinalizeFailureError,
    IvLengthMismatchError,
    OracleError,
    SealFailureError,
    SetupFailureError,
    UpdateFailureError,
)
from src.cavp_oracle.core.models import (
    CipherRequest,
    CipherResult,
    OpenRequest,
    OpenResult,
    SealRequest,
    SealResult,
)
from src.cavp_oracle.core.registry import CipherRegistry, resolve_aead, resolve_cipher
from src.cavp_oracle.service import AEADOracle, CipherOracle

__all__ = [
    # Functions
    "encode_hex",
    "resolve_cipher",
    "resolve_aead",
    "apply_cipher",
    "seal_aead",
    "open_aead",
    # Oracles
    "CipherOracle",
    "AEADOracle",
    "CipherRegistry",
    # Descriptors
    "CipherDescriptor",
    "CipherFamily",
    "CipherMode",
    "Direction",
    "AEADDescriptor",
    "AeadFamily",
    # Requests / results
    "CipherRequest",
    "CipherResult",
    "SealRequest",
    "SealResult",
    "OpenRequest",
    "OpenResult",
    # Config
    "OracleConfig",
    "OracleProfile",
    "DEFAULT_CONFIG",
    "load_config",
    # Errors
    "FailureKind",
    "OracleError",
    "AlgorithmNotFoundError",
    "SetupFailureError",
    "IvLengthMismatchError",
    "UpdateFailureError",
    "FinalizeFailureError",
    "SealFailureError",
    "AuthenticationFailureError",
]
