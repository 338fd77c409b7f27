"""
CipherOracle: один проход шифрования/расшифрования без дополнения.

Оракул проверяет длину IV, открывает свежий контекст примитива,
выполняет ровно один update и один finalize и возвращает их
конкатенацию. Любой отказ терминален для вызова и поднимается как
типизированное исключение из src.cavp_oracle.core.exceptions.

Поток операции:
    1. Непустой IV должен совпадать с iv_length_bytes дескриптора
       (иначе IvLengthMismatchError). Пустой IV для режима с IV
       означает нулевой IV.
    2. Настройка примитива: ключ фактической длины, направление, IV
       (SetupFailureError при отказе).
    3. update(input) → UpdateFailureError при отказе.
    4. finalize() → FinalizeFailureError при отказе.
    5. len(output) != len(input) → FinalizeFailureError (без усечения).

Example:
    >>> oracle = CipherOracle()
    >>> request = CipherRequest(
    ...     descriptor=resolve_cipher("aes-128-ecb"),
    ...     direction=Direction.ENCRYPT,
    ...     key=bytes(16),
    ...     iv=b"",
    ...     input=bytes(16),
    ... )
    >>> oracle.apply(request).output.hex()
    '66e94bd4ef8a2c3b884cfa59ca342b2e'
"""

from __future__ import annotations

import logging
from typing import Optional

from src.cavp_oracle.config import DEFAULT_CONFIG, OracleConfig
from src.cavp_oracle.core.exceptions import (
    FinalizeFailureError,
    IvLengthMismatchError,
    UpdateFailureError,
)
from src.cavp_oracle.core.models import CipherRequest, CipherResult
from src.cavp_oracle.primitives.block import cipher_context

__all__ = [
    "CipherOracle",
]

logger = logging.getLogger(__name__)


class CipherOracle:
    """
    Оракул однопроходных операций блочных и потоковых шифров.

    Thread Safety:
        Не хранит изменяемого состояния: каждый вызов apply() получает
        собственный контекст примитива и освобождает его при выходе.

    Attributes:
        config: Конфигурация оракула (используется warn_on_legacy)
    """

    def __init__(self, config: Optional[OracleConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def apply(self, request: CipherRequest) -> CipherResult:
        """
        Выполнить одну операцию шифра над вектором.

        Args:
            request: Дескриптор, направление, ключ, IV и вход

        Returns:
            CipherResult с выходом той же длины, что и вход

        Raises:
            IvLengthMismatchError: Непустой IV неверной длины
            SetupFailureError: Примитив отклонил ключ/IV/режим
            UpdateFailureError: Отказ шага update
            FinalizeFailureError: Отказ шага finalize или длина выхода
                                  не совпала с длиной входа
        """
        descriptor = request.descriptor
        algo_id = descriptor.identifier

        if request.iv and len(request.iv) != descriptor.iv_length_bytes:
            raise IvLengthMismatchError(
                algo_id, descriptor.iv_length_bytes, len(request.iv)
            )

        with cipher_context(
            descriptor,
            request.direction,
            request.key,
            request.iv,
            warn_on_legacy=self.config.warn_on_legacy,
        ) as ctx:
            try:
                head = ctx.update(request.input)
            except Exception as exc:
                raise UpdateFailureError(
                    f"Update rejected by primitive: {type(exc).__name__}",
                    algorithm=algo_id,
                    context={"input_length": len(request.input)},
                ) from exc

            try:
                tail = ctx.finalize()
            except Exception as exc:
                raise FinalizeFailureError(
                    f"Finalize rejected by primitive: {type(exc).__name__}",
                    algorithm=algo_id,
                    context={"input_length": len(request.input)},
                ) from exc

        output = head + tail
        if len(output) != len(request.input):
            raise FinalizeFailureError(
                "Output length differs from input length",
                algorithm=algo_id,
                context={
                    "input_length": len(request.input),
                    "output_length": len(output),
                },
            )

        logger.debug(
            "apply: algorithm=%s direction=%s length=%d",
            algo_id,
            request.direction.value,
            len(output),
        )
        return CipherResult(output=output)
