"""
AEADOracle: seal/open AEAD конструкций с извлечением nonce и тега.

Nonce генерирует сам примитив при seal; оракул только раскладывает
объединённый выход ``nonce || ciphertext || tag`` на части. При open
оракул собирает тот же формат из частей вектора и сверяет длину
открытого текста с ожидаемой.

Отказ проверки тега и несовпадение длины открытого текста сведены в
один AuthenticationFailureError: для вектора важен только признак
pass/fail.

Example:
    >>> oracle = AEADOracle()
    >>> sealed = oracle.seal(SealRequest(resolve_aead("aes-128-gcm"), key, b"msg", b"aad"))
    >>> opened = oracle.open(OpenRequest(
    ...     descriptor=resolve_aead("aes-128-gcm"), key=key,
    ...     nonce=sealed.nonce, ciphertext=sealed.ciphertext, tag=sealed.tag,
    ...     associated_data=b"aad", expected_plaintext_length=3,
    ...     expected_aad_length=3,
    ... ))
    >>> opened.plaintext
    b'msg'
"""

from __future__ import annotations

import logging
from typing import Optional

from src.cavp_oracle.config import DEFAULT_CONFIG, OracleConfig
from src.cavp_oracle.core.exceptions import AuthenticationFailureError, SealFailureError
from src.cavp_oracle.core.models import OpenRequest, OpenResult, SealRequest, SealResult
from src.cavp_oracle.primitives.aead import AeadDirection, aead_context

__all__ = [
    "AEADOracle",
]

logger = logging.getLogger(__name__)


class AEADOracle:
    """
    Оракул AEAD операций seal/open.

    Thread Safety:
        Stateless: каждый вызов получает свежий контекст примитива.

    Attributes:
        config: Политика длин тега и предупреждений
    """

    def __init__(self, config: Optional[OracleConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    # --------------------------------------------------------------------------
    # SEAL
    # --------------------------------------------------------------------------

    def seal(self, request: SealRequest) -> SealResult:
        """
        Зашифровать и аутентифицировать открытый текст.

        Args:
            request: Дескриптор, ключ, открытый текст, AAD и длина тега
                     (None - default_tag_length из конфигурации)

        Returns:
            SealResult: nonce (первые nonce_length_bytes), ciphertext,
            tag (последние tag_length_bytes)

        Raises:
            SetupFailureError: Примитив отклонил ключ или длину тега
            SealFailureError: Ошибка примитива или выход превысил
                              len(plaintext) + max_overhead_bytes
        """
        descriptor = request.descriptor
        algo_id = descriptor.identifier
        tag_length = (
            request.tag_length_bytes
            if request.tag_length_bytes is not None
            else self.config.default_tag_length
        )
        capacity = len(request.plaintext) + descriptor.max_overhead_bytes

        with aead_context(
            descriptor, request.key, tag_length, AeadDirection.SEAL, self.config
        ) as ctx:
            try:
                sealed = ctx.seal(request.plaintext, request.associated_data)
            except Exception as exc:
                raise SealFailureError(
                    f"Seal rejected by primitive: {type(exc).__name__}",
                    algorithm=algo_id,
                    context={"plaintext_length": len(request.plaintext)},
                ) from exc

        nonce_end = descriptor.nonce_length_bytes
        tag_start = len(sealed) - tag_length
        if len(sealed) > capacity or tag_start < nonce_end:
            raise SealFailureError(
                "Sealed output does not fit the output buffer",
                algorithm=algo_id,
                context={"capacity": capacity, "output_length": len(sealed)},
            )

        logger.debug(
            "seal: algorithm=%s plaintext=%d aad=%d tag=%d",
            algo_id,
            len(request.plaintext),
            len(request.associated_data),
            tag_length,
        )
        return SealResult(
            nonce=sealed[:nonce_end],
            ciphertext=sealed[nonce_end:tag_start],
            tag=sealed[tag_start:],
        )

    # --------------------------------------------------------------------------
    # OPEN
    # --------------------------------------------------------------------------

    def open(self, request: OpenRequest) -> OpenResult:
        """
        Проверить тег и расшифровать.

        Args:
            request: Части вектора: nonce, ciphertext, tag, AAD и ожидаемые длины

        Returns:
            OpenResult с открытым текстом и эхом AAD

        Raises:
            SetupFailureError: Примитив отклонил ключ или len(tag)
            AuthenticationFailureError: Тег не прошёл проверку, либо длина
                                        открытого текста не совпала с ожидаемой
        """
        descriptor = request.descriptor
        algo_id = descriptor.identifier
        sealed = request.nonce + request.ciphertext + request.tag

        with aead_context(
            descriptor, request.key, len(request.tag), AeadDirection.OPEN, self.config
        ) as ctx:
            try:
                plaintext = ctx.open(sealed, request.associated_data)
            except Exception as exc:
                raise AuthenticationFailureError(
                    "Authentication failed",
                    algorithm=algo_id,
                    context={"ciphertext_length": len(request.ciphertext)},
                ) from exc

        if len(plaintext) != request.expected_plaintext_length:
            raise AuthenticationFailureError(
                "Plaintext length differs from expected",
                algorithm=algo_id,
                context={
                    "expected": request.expected_plaintext_length,
                    "actual": len(plaintext),
                },
            )

        logger.debug(
            "open: algorithm=%s plaintext=%d aad=%d",
            algo_id,
            len(plaintext),
            len(request.associated_data),
        )
        return OpenResult(plaintext=plaintext, associated_data=request.associated_data)
