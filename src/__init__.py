"""
Пакет CAVP Conformance Oracle
=============================

Детерминированный оракул соответствия для симметричных шифров и AEAD.

Пакет получает от внешнего стенда уже разобранные поля тестовых векторов
(ключ, IV/nonce, открытый текст, шифртекст, тег, AAD) и идентификатор
алгоритма, выполняет ровно одну операцию примитива и возвращает байты
для побайтового сравнения с ожидаемым результатом.

Этот пакет предоставляет:
    - Реестр шифров (DES, 3DES, RC4, AES в режимах ECB/CBC/CTR/OFB/GCM)
    - Оракул блочного/потокового шифрования без дополнения
    - AEAD оракул (seal/open) с разбором nonce | ciphertext | tag
    - Hex-кодек для вывода результатов

Пример базового использования:
    >>> from src import get_logger
    >>> from src.cavp_oracle import apply_cipher, encode_hex, resolve_cipher
    >>>
    >>> logger = get_logger(__name__)
    >>> descriptor = resolve_cipher("aes-128-ecb")
    >>> out = apply_cipher(descriptor, "encrypt", bytes(16), b"", bytes(16))
    >>> encode_hex(out)
    '66e94bd4ef8a2c3b884cfa59ca342b2e'

Управление логированием:
    >>> import os
    >>> os.environ['CAVP_ORACLE_LOG_LEVEL'] = 'DEBUG'
    >>> os.environ['CAVP_ORACLE_LOG_FILE'] = 'logs/cavp_oracle.log'

Версия: 0.1.0
Лицензия: MIT
Python: 3.10+
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Dict

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "CAVP Oracle Development Team"
__description__ = "Deterministic conformance oracle for symmetric ciphers and AEADs"
__license__ = "MIT"
__python_requires__ = ">=3.10"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

# Корневое имя логгеров пакета
LOGGER_NAMESPACE = __name__

if sys.version_info < (3, 10):
    raise RuntimeError(
        f"CAVP Oracle требует Python 3.10 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================


def _setup_logging() -> None:
    """
    Инициализировать общепакетную конфигурацию логирования.

    Настраивает логгер пакета с:
    - Консольным обработчиком (stderr) для WARNING и выше
    - Ротирующим файловым обработчиком, если задана переменная
      окружения CAVP_ORACLE_LOG_FILE

    Уровень логирования задаётся переменной окружения
    CAVP_ORACLE_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Функция идемпотентна - повторные вызовы не добавляют обработчиков.
    """
    log_level_str = os.environ.get("CAVP_ORACLE_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    if package_logger.handlers:
        return

    package_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Консольный обработчик (stderr) - WARNING и выше
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    log_file = os.environ.get("CAVP_ORACLE_LOG_FILE")
    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)
        except OSError as e:
            package_logger.warning(
                f"Не удалось инициализировать файловое логирование: {e}. "
                f"Используется только консоль."
            )

    package_logger.propagate = False


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер в пространстве имён пакета.

    Аргументы:
        module_name: Имя модуля, обычно `__name__`.

    Возвращает:
        Экземпляр logging.Logger с именем '<пакет>.<module_name>'.

    Пример:
        >>> get_logger("harness").name
        'src.harness'
        >>> get_logger("src.cavp_oracle.codec").name
        'src.cavp_oracle.codec'
    """
    if module_name == LOGGER_NAMESPACE or module_name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(module_name)

    if module_name == "__main__":
        return logging.getLogger(f"{LOGGER_NAMESPACE}.main")

    clean_name = module_name.lstrip(".")
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{clean_name}")


# =============================================================================
# ПРОВЕРКА ЗАВИСИМОСТЕЙ
# =============================================================================


def check_dependencies() -> Dict[str, bool]:
    """
    Проверить доступность библиотек-примитивов.

    Функция не вызывает исключений для отсутствующих пакетов -
    возвращает словарь состояний.

    Проверяемые зависимости:
        - cryptography: AES, TripleDES, AES-GCM, ChaCha20-Poly1305
        - pycryptodome: DES, RC4, XChaCha20-Poly1305

    Возвращает:
        Словарь {имя пакета: доступен ли}.

    Пример:
        >>> deps = check_dependencies()
        >>> deps["cryptography"]
        True
    """
    dependencies: Dict[str, bool] = {}

    try:
        import cryptography  # noqa: F401

        dependencies["cryptography"] = True
    except ImportError:
        dependencies["cryptography"] = False

    try:
        import Crypto  # noqa: F401

        dependencies["pycryptodome"] = True
    except ImportError:
        dependencies["pycryptodome"] = False

    return dependencies


_setup_logging()

__all__ = [
    "__version__",
    "LOGGER_NAMESPACE",
    "get_logger",
    "check_dependencies",
]
