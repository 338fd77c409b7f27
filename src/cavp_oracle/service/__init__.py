"""
Сервисный слой оракула.

    CipherOracle - один проход блочного/потокового шифра
    AEADOracle   - seal/open AEAD конструкций
"""

from src.cavp_oracle.service.aead_oracle import AEADOracle
from src.cavp_oracle.service.cipher_oracle import CipherOracle

__all__ = [
    "CipherOracle",
    "AEADOracle",
]
