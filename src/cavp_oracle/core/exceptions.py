"""
Исключения оракула соответствия.

Закрытая таксономия отказов одного вызова оракула. Каждый отказ
терминален для своего вызова: без повторов, без частичного результата.
Стенд переводит любой отказ в "FAIL" тестового вектора, перехватывая
базовый OracleError.

Example:
    >>> from src.cavp_oracle.core.exceptions import OracleError
    >>> try:
    ...     oracle.apply(request)
    ... except OracleError as e:
    ...     logger.info(f"Vector FAIL: {e.kind.value}")

Иерархия:
    OracleError (базовое)
    ├── AlgorithmNotFoundError          (not_found)
    ├── SetupFailureError               (setup_failure)
    ├── CipherOperationError
    │   ├── IvLengthMismatchError       (iv_length_mismatch)
    │   ├── UpdateFailureError          (update_failure)
    │   └── FinalizeFailureError        (finalize_failure)
    └── AeadOperationError
        ├── SealFailureError            (seal_failure)
        └── AuthenticationFailureError  (authentication_failure)

Security Note:
    Сообщения исключений НЕ содержат ключей, открытого текста,
    шифртекста, nonce/IV или тегов - только длины и имена алгоритмов.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

__all__: list[str] = [
    "FailureKind",
    "OracleError",
    "AlgorithmNotFoundError",
    "SetupFailureError",
    "CipherOperationError",
    "IvLengthMismatchError",
    "UpdateFailureError",
    "FinalizeFailureError",
    "AeadOperationError",
    "SealFailureError",
    "AuthenticationFailureError",
]


# ==============================================================================
# FAILURE KINDS
# ==============================================================================


class FailureKind(str, Enum):
    """
    Вид отказа, видимый стенду.

    Наследует str для корректной JSON сериализации.

    Example:
        >>> FailureKind.AUTHENTICATION_FAILURE.value
        'authentication_failure'
    """

    NOT_FOUND = "not_found"
    IV_LENGTH_MISMATCH = "iv_length_mismatch"
    SETUP_FAILURE = "setup_failure"
    UPDATE_FAILURE = "update_failure"
    FINALIZE_FAILURE = "finalize_failure"
    SEAL_FAILURE = "seal_failure"
    AUTHENTICATION_FAILURE = "authentication_failure"


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class OracleError(Exception):
    """
    Базовое исключение для всех отказов оракула.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        algorithm: Идентификатор алгоритма (опционально)
        context: Дополнительный контекст без секретов (опционально)
        kind: Вид отказа (атрибут класса). None только у абстрактных
              баз OracleError, CipherOperationError и AeadOperationError,
              которые оракул не поднимает напрямую

    Example:
        >>> err = OracleError("Operation failed", algorithm="aes-128-cbc")
        >>> str(err)
        'OracleError: Operation failed [algorithm=aes-128-cbc]'
    """

    kind: Optional[FailureKind] = None

    def __init__(
        self,
        message: str,
        *,
        algorithm: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.algorithm = algorithm
        self.context = context or {}

    def __str__(self) -> str:
        """
        Строковое представление исключения.

        Returns:
            Форматированное сообщение с контекстом

        Example:
            >>> str(IvLengthMismatchError("aes-128-cbc", 16, 8))
            'IvLengthMismatchError: IV length 8 does not match 16 [algorithm=aes-128-cbc] (expected=16, actual=8)'
        """
        parts = [self.__class__.__name__, ": ", self.message]

        if self.algorithm:
            parts.append(f" [algorithm={self.algorithm}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        """Представление для отладки."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"algorithm={self.algorithm!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# REGISTRY ERRORS
# ==============================================================================


class AlgorithmNotFoundError(OracleError):
    """
    Идентификатор алгоритма отсутствует в закрытом наборе реестра.

    Attributes:
        algorithm_name: Запрошенный идентификатор
        available: Список поддерживаемых идентификаторов

    Example:
        >>> err = AlgorithmNotFoundError("not-an-algorithm")
        >>> err.message
        "Algorithm 'not-an-algorithm' not found in registry"
    """

    kind = FailureKind.NOT_FOUND

    def __init__(
        self,
        algorithm_name: str,
        available: Optional[List[str]] = None,
    ) -> None:
        message = f"Algorithm '{algorithm_name}' not found in registry"

        if available:
            message += f". Available: {', '.join(available[:5])}"
            if len(available) > 5:
                message += f" ... ({len(available)} total)"

        super().__init__(
            message,
            algorithm=algorithm_name,
            context={"available_count": len(available) if available else 0},
        )
        self.algorithm_name = algorithm_name
        self.available = available or []


# ==============================================================================
# SETUP ERRORS
# ==============================================================================


class SetupFailureError(OracleError):
    """
    Примитив отклонил конфигурацию (длину ключа, длину тега, режим).

    Общий для CipherOracle и AEADOracle.

    Example:
        >>> raise SetupFailureError(
        ...     "Key length rejected by primitive",
        ...     algorithm="aes-128-ecb",
        ...     context={"key_length": 32},
        ... )
    """

    kind = FailureKind.SETUP_FAILURE


# ==============================================================================
# CIPHER ERRORS
# ==============================================================================


class CipherOperationError(OracleError):
    """Абстрактная база отказов однопроходной операции (kind не задан)."""

    pass


class IvLengthMismatchError(CipherOperationError):
    """
    Переданный непустой IV не совпадает с длиной IV дескриптора.

    Attributes:
        expected: Длина IV дескриптора в байтах
        actual: Длина переданного IV в байтах
    """

    kind = FailureKind.IV_LENGTH_MISMATCH

    def __init__(self, algorithm: str, expected: int, actual: int) -> None:
        super().__init__(
            f"IV length {actual} does not match {expected}",
            algorithm=algorithm,
            context={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class UpdateFailureError(CipherOperationError):
    """Примитив отклонил проход update (например, невыровненный блок)."""

    kind = FailureKind.UPDATE_FAILURE


class FinalizeFailureError(CipherOperationError):
    """
    Отказ на шаге finalize.

    Также возникает, если длина результата не совпадает с длиной входа:
    дополнение отключено, поэтому расхождение означает ошибку примитива.
    """

    kind = FailureKind.FINALIZE_FAILURE


# ==============================================================================
# AEAD ERRORS
# ==============================================================================


class AeadOperationError(OracleError):
    """Абстрактная база отказов AEAD операций seal/open (kind не задан)."""

    pass


class SealFailureError(AeadOperationError):
    """Операция seal не удалась (ошибка примитива или размера буфера)."""

    kind = FailureKind.SEAL_FAILURE


class AuthenticationFailureError(AeadOperationError):
    """
    Операция open не удалась.

    Отказ проверки тега и несовпадение длины открытого текста
    намеренно сведены в один вид отказа: стенду нужен только
    признак pass/fail для вектора.
    """

    kind = FailureKind.AUTHENTICATION_FAILURE
