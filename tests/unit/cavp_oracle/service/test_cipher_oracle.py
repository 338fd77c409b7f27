"""
Unit-тесты для CipherOracle.

Проверяет:
- Known-answer векторы (FIPS 197, NIST SP 800-38A, DES, RC4)
- Round-trip encrypt/decrypt для всех не-GCM дескрипторов
- Обработку IV (несовпадение длины, пустой IV = нулевой IV)
- Отказы setup/update/finalize
- Поведение GCM дескрипторов через однопроходный интерфейс
- Предупреждения о устаревших шифрах
- Конкурентные вызовы
"""

import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Tuple
from unittest import mock

import pytest
from cryptography.utils import CryptographyDeprecationWarning

from src.cavp_oracle.config import OracleConfig
from src.cavp_oracle.core.descriptors import CipherMode, Direction
from src.cavp_oracle.core.exceptions import (
    FailureKind,
    FinalizeFailureError,
    IvLengthMismatchError,
    OracleError,
    SetupFailureError,
    UpdateFailureError,
)
from src.cavp_oracle.core.models import CipherRequest
from src.cavp_oracle.core.registry import CIPHER_TABLE, resolve_cipher
from src.cavp_oracle.primitives.block import CipherContext
from src.cavp_oracle.service.cipher_oracle import CipherOracle

# NIST SP 800-38A, Appendix F: первый блок каждого примера
SP800_38A_PLAINTEXT = "6bc1bee22e409f96e93d7e117393172a"
SP800_38A_CBC_IV = "000102030405060708090a0b0c0d0e0f"
SP800_38A_CTR_IV = "f0f1f2f3f4f5f6f7f8f9fafbfcfdfeff"

AES_128_KEY = "2b7e151628aed2a6abf7158809cf4f3c"
AES_192_KEY = "8e73b0f7da0e6452c810f32b809079e562f8ead2522c6b7b"
AES_256_KEY = "603deb1015ca71be2b73aef0857d77811f352c073b6108d72d9810a30914dff4"

SP800_38A_VECTORS = [
    ("aes-128-ecb", AES_128_KEY, "", "3ad77bb40d7a3660a89ecaf32466ef97"),
    ("aes-128-cbc", AES_128_KEY, SP800_38A_CBC_IV, "7649abac8119b246cee98e9b12e9197d"),
    ("aes-128-ctr", AES_128_KEY, SP800_38A_CTR_IV, "874d6191b620e3261bef6864990db6ce"),
    ("aes-128-ofb", AES_128_KEY, SP800_38A_CBC_IV, "3b3fd92eb72dad20333449f8e83cfb4a"),
    ("aes-192-ecb", AES_192_KEY, "", "bd334f1d6e45f25ff712a214571fa5cc"),
    ("aes-192-cbc", AES_192_KEY, SP800_38A_CBC_IV, "4f021db243bc633d7178183a9fa071e8"),
    ("aes-192-ctr", AES_192_KEY, SP800_38A_CTR_IV, "1abc932417521ca24f2b0459fe7e6e0b"),
    ("aes-256-ecb", AES_256_KEY, "", "f3eed1bdb5d2a03c064b5a7e3db181f8"),
    ("aes-256-cbc", AES_256_KEY, SP800_38A_CBC_IV, "f58c4c04d6e5f1ba779eabfb5f7bfbd6"),
    ("aes-256-ctr", AES_256_KEY, SP800_38A_CTR_IV, "601ec313775789a5b7a7f504bbf3d228"),
    ("aes-256-ofb", AES_256_KEY, SP800_38A_CBC_IV, "dc7e84bfda79164b7ecd8486985d3860"),
]

DES_KEY = bytes.fromhex("133457799bbcdff1")
DES_PLAINTEXT = bytes.fromhex("0123456789abcdef")
DES_CIPHERTEXT = bytes.fromhex("85e813540f0ab405")

ROUND_TRIP_IDS = sorted(
    name for name, d in CIPHER_TABLE.items() if d.mode is not CipherMode.GCM
)


@pytest.fixture
def oracle() -> CipherOracle:
    """Оракул с конфигурацией по умолчанию."""
    return CipherOracle()


def _request(
    identifier: str, direction: Direction, key: bytes, iv: bytes, data: bytes
) -> CipherRequest:
    return CipherRequest(resolve_cipher(identifier), direction, key, iv, data)


def _material(identifier: str) -> Tuple[bytes, bytes, bytes]:
    """Детерминированные ключ, IV и два блока входа для дескриптора."""
    d = resolve_cipher(identifier)
    key = bytes((i * 7 + 1) % 256 for i in range(d.key_length_bytes))
    iv = bytes((i * 3 + 5) % 256 for i in range(d.iv_length_bytes))
    data = bytes(range(2 * d.family.block_size if not d.is_stream else 23))
    return key, iv, data


# ==============================================================================
# KNOWN-ANSWER TESTS
# ==============================================================================


class TestKnownAnswers:
    """Векторы известных ответов."""

    def test_aes_128_ecb_zero_key(self, oracle: CipherOracle) -> None:
        """FIPS 197: нулевой ключ, нулевой блок."""
        result = oracle.apply(
            _request("aes-128-ecb", Direction.ENCRYPT, bytes(16), b"", bytes(16))
        )
        assert result.output.hex() == "66e94bd4ef8a2c3b884cfa59ca342b2e"

    @pytest.mark.parametrize("identifier,key,iv,expected", SP800_38A_VECTORS)
    def test_sp800_38a_encrypt(
        self, oracle: CipherOracle, identifier: str, key: str, iv: str, expected: str
    ) -> None:
        result = oracle.apply(
            _request(
                identifier,
                Direction.ENCRYPT,
                bytes.fromhex(key),
                bytes.fromhex(iv),
                bytes.fromhex(SP800_38A_PLAINTEXT),
            )
        )
        assert result.output.hex() == expected

    @pytest.mark.parametrize("identifier,key,iv,expected", SP800_38A_VECTORS)
    def test_sp800_38a_decrypt(
        self, oracle: CipherOracle, identifier: str, key: str, iv: str, expected: str
    ) -> None:
        result = oracle.apply(
            _request(
                identifier,
                Direction.DECRYPT,
                bytes.fromhex(key),
                bytes.fromhex(iv),
                bytes.fromhex(expected),
            )
        )
        assert result.output.hex() == SP800_38A_PLAINTEXT

    @pytest.mark.parametrize(
        "identifier,key",
        [
            ("des-ecb", DES_KEY),
            ("des-ede", DES_KEY * 2),
            ("des-ede3", DES_KEY * 3),
        ],
    )
    def test_des_family_degenerate_keys(
        self, oracle: CipherOracle, identifier: str, key: bytes
    ) -> None:
        """3DES с повторёнными подключами вырождается в одиночный DES."""
        result = oracle.apply(
            _request(identifier, Direction.ENCRYPT, key, b"", DES_PLAINTEXT)
        )
        assert result.output == DES_CIPHERTEXT

    def test_des_cbc_single_block_zero_iv(self, oracle: CipherOracle) -> None:
        """CBC с нулевым IV на одном блоке совпадает с ECB."""
        result = oracle.apply(
            _request("des-cbc", Direction.ENCRYPT, DES_KEY, bytes(8), DES_PLAINTEXT)
        )
        assert result.output == DES_CIPHERTEXT

    def test_rc4(self, oracle: CipherOracle) -> None:
        result = oracle.apply(
            _request("rc4", Direction.ENCRYPT, b"Secret", b"", b"Attack at dawn")
        )
        assert result.output.hex() == "45a01f645fc35b383552544b9bf5"

    @pytest.mark.parametrize("identifier,iv", [("des-ede", b""), ("des-ede-cbc", bytes(8))])
    def test_two_key_triple_des_without_deprecation(
        self, oracle: CipherOracle, identifier: str, iv: bytes
    ) -> None:
        """Ключ K1 || K2 передаётся примитиву как K1 || K2 || K1."""
        key = bytes(range(16))
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            two_key = oracle.apply(_request(identifier, Direction.ENCRYPT, key, iv, bytes(8)))
        assert not [w for w in caught if issubclass(w.category, CryptographyDeprecationWarning)]

        three_key_id = identifier.replace("des-ede", "des-ede3")
        three_key = oracle.apply(
            _request(three_key_id, Direction.ENCRYPT, key + key[:8], iv, bytes(8))
        )
        assert two_key.output == three_key.output


# ==============================================================================
# ROUND TRIP
# ==============================================================================


class TestRoundTrip:
    """Decrypt(Encrypt(x)) == x для всех не-GCM дескрипторов."""

    @pytest.mark.parametrize("identifier", ROUND_TRIP_IDS)
    def test_round_trip(self, oracle: CipherOracle, identifier: str) -> None:
        key, iv, data = _material(identifier)
        encrypted = oracle.apply(_request(identifier, Direction.ENCRYPT, key, iv, data))
        assert len(encrypted.output) == len(data)
        assert encrypted.output != data

        decrypted = oracle.apply(
            _request(identifier, Direction.DECRYPT, key, iv, encrypted.output)
        )
        assert decrypted.output == data

    def test_empty_input(self, oracle: CipherOracle) -> None:
        result = oracle.apply(
            _request("aes-128-cbc", Direction.ENCRYPT, bytes(16), bytes(16), b"")
        )
        assert result.output == b""

    def test_ctr_partial_block(self, oracle: CipherOracle) -> None:
        """Режим счётчика принимает вход произвольной длины."""
        result = oracle.apply(
            _request("aes-128-ctr", Direction.ENCRYPT, bytes(16), bytes(16), bytes(15))
        )
        assert len(result.output) == 15

    def test_rc4_variable_key_length(self, oracle: CipherOracle) -> None:
        result = oracle.apply(_request("rc4", Direction.ENCRYPT, b"\x01", b"", b"abc"))
        assert len(result.output) == 3


# ==============================================================================
# IV HANDLING
# ==============================================================================


class TestIvHandling:
    """Проверка длины IV."""

    def test_iv_length_mismatch(self, oracle: CipherOracle) -> None:
        with pytest.raises(IvLengthMismatchError) as exc_info:
            oracle.apply(
                _request("aes-128-cbc", Direction.ENCRYPT, bytes(16), bytes(8), bytes(16))
            )
        assert exc_info.value.kind is FailureKind.IV_LENGTH_MISMATCH
        assert (exc_info.value.expected, exc_info.value.actual) == (16, 8)

    def test_iv_given_for_ecb(self, oracle: CipherOracle) -> None:
        with pytest.raises(IvLengthMismatchError):
            oracle.apply(
                _request("aes-128-ecb", Direction.ENCRYPT, bytes(16), bytes(16), bytes(16))
            )

    def test_iv_mismatch_checked_before_key(self, oracle: CipherOracle) -> None:
        with pytest.raises(IvLengthMismatchError):
            oracle.apply(_request("des-cbc", Direction.ENCRYPT, b"", bytes(16), bytes(8)))

    @pytest.mark.parametrize("identifier", ["aes-128-cbc", "aes-256-ofb", "des-ede3-cbc"])
    def test_empty_iv_means_zero_iv(self, oracle: CipherOracle, identifier: str) -> None:
        key, iv, data = _material(identifier)
        zero_iv = bytes(len(iv))
        implicit = oracle.apply(_request(identifier, Direction.ENCRYPT, key, b"", data))
        explicit = oracle.apply(_request(identifier, Direction.ENCRYPT, key, zero_iv, data))
        assert implicit.output == explicit.output


# ==============================================================================
# FAILURES
# ==============================================================================


class TestFailures:
    """Отказы примитива."""

    @pytest.mark.parametrize(
        "identifier,key",
        [
            ("aes-128-ecb", bytes(32)),
            ("aes-256-cbc", bytes(16)),
            ("des-cbc", bytes(16)),
            ("des-ede3", bytes(16)),
            ("rc4", b""),
            ("rc4", bytes(257)),
        ],
    )
    def test_setup_failure(self, oracle: CipherOracle, identifier: str, key: bytes) -> None:
        d = resolve_cipher(identifier)
        with pytest.raises(SetupFailureError) as exc_info:
            oracle.apply(CipherRequest(d, Direction.ENCRYPT, key, b"", bytes(d.block_size)))
        assert exc_info.value.kind is FailureKind.SETUP_FAILURE
        assert exc_info.value.algorithm == identifier

    def test_unaligned_aes_cbc_fails_at_finalize(self, oracle: CipherOracle) -> None:
        with pytest.raises(FinalizeFailureError) as exc_info:
            oracle.apply(
                _request("aes-128-cbc", Direction.ENCRYPT, bytes(16), bytes(16), bytes(15))
            )
        assert exc_info.value.__cause__ is not None

    def test_unaligned_aes_ecb_decrypt(self, oracle: CipherOracle) -> None:
        with pytest.raises(FinalizeFailureError):
            oracle.apply(_request("aes-256-ecb", Direction.DECRYPT, bytes(32), b"", bytes(17)))

    @pytest.mark.parametrize("identifier", ["des-ecb", "des-cbc"])
    def test_unaligned_des_fails_at_update(self, oracle: CipherOracle, identifier: str) -> None:
        with pytest.raises(UpdateFailureError) as exc_info:
            oracle.apply(_request(identifier, Direction.ENCRYPT, DES_KEY, b"", bytes(7)))
        assert exc_info.value.kind is FailureKind.UPDATE_FAILURE

    def test_unaligned_triple_des(self, oracle: CipherOracle) -> None:
        with pytest.raises(FinalizeFailureError):
            oracle.apply(_request("des-ede3", Direction.ENCRYPT, DES_KEY * 3, b"", bytes(12)))

    def test_failure_message_has_no_key_material(self, oracle: CipherOracle) -> None:
        key = bytes.fromhex("a5" * 32)
        with pytest.raises(OracleError) as exc_info:
            oracle.apply(_request("aes-128-ecb", Direction.ENCRYPT, key, b"", bytes(16)))
        assert "a5a5" not in str(exc_info.value)

    def test_output_length_mismatch_is_finalize_failure(self, oracle: CipherOracle) -> None:
        """Лишние байты из finalize не усекаются, а дают отказ."""
        with mock.patch.object(CipherContext, "finalize", return_value=b"\x00"):
            with pytest.raises(FinalizeFailureError) as exc_info:
                oracle.apply(
                    _request("aes-128-ecb", Direction.ENCRYPT, bytes(16), b"", bytes(16))
                )
        assert exc_info.value.kind is FailureKind.FINALIZE_FAILURE
        assert exc_info.value.context == {"input_length": 16, "output_length": 17}
        assert exc_info.value.__cause__ is None


# ==============================================================================
# GCM THROUGH THE ONE-PASS INTERFACE
# ==============================================================================


class TestGcmDescriptors:
    """GCM дескрипторы без тега."""

    @pytest.mark.parametrize("identifier", ["aes-128-gcm", "aes-256-gcm"])
    def test_encrypt_is_gcm_keystream(self, oracle: CipherOracle, identifier: str) -> None:
        """Шифрование GCM совпадает с CTR от счётчика IV || 00000002."""
        d = resolve_cipher(identifier)
        key = bytes(range(d.key_length_bytes))
        iv = bytes.fromhex("cafebabefacedbaddecaf888")
        data = bytes(range(37))

        gcm = oracle.apply(CipherRequest(d, Direction.ENCRYPT, key, iv, data))
        ctr_id = identifier.replace("gcm", "ctr")
        ctr = oracle.apply(
            _request(ctr_id, Direction.ENCRYPT, key, iv + b"\x00\x00\x00\x02", data)
        )
        assert gcm.output == ctr.output

    def test_decrypt_without_tag_fails(self, oracle: CipherOracle) -> None:
        """Без тега расшифрование GCM не может завершиться."""
        with pytest.raises(FinalizeFailureError) as exc_info:
            oracle.apply(
                _request("aes-128-gcm", Direction.DECRYPT, bytes(16), bytes(12), bytes(16))
            )
        assert exc_info.value.kind is FailureKind.FINALIZE_FAILURE

    def test_gcm_iv_length_enforced(self, oracle: CipherOracle) -> None:
        with pytest.raises(IvLengthMismatchError):
            oracle.apply(
                _request("aes-128-gcm", Direction.ENCRYPT, bytes(16), bytes(16), bytes(16))
            )


# ==============================================================================
# LOGGING
# ==============================================================================


class TestLegacyWarning:
    """Предупреждения об устаревших шифрах."""

    def test_legacy_cipher_warns(self, oracle: CipherOracle) -> None:
        with mock.patch("src.cavp_oracle.primitives.block.logger") as mock_logger:
            oracle.apply(_request("rc4", Direction.ENCRYPT, b"key", b"", b"data"))
        mock_logger.warning.assert_called_once()
        assert "rc4" in mock_logger.warning.call_args[0][0]

    def test_modern_cipher_does_not_warn(self, oracle: CipherOracle) -> None:
        with mock.patch("src.cavp_oracle.primitives.block.logger") as mock_logger:
            oracle.apply(_request("des-ede3", Direction.ENCRYPT, DES_KEY * 3, b"", bytes(8)))
        mock_logger.warning.assert_not_called()

    def test_warning_disabled_by_config(self) -> None:
        oracle = CipherOracle(OracleConfig(warn_on_legacy=False))
        with mock.patch("src.cavp_oracle.primitives.block.logger") as mock_logger:
            oracle.apply(_request("des-ecb", Direction.ENCRYPT, DES_KEY, b"", bytes(8)))
        mock_logger.warning.assert_not_called()


# ==============================================================================
# CONCURRENCY
# ==============================================================================


class TestConcurrency:
    """Параллельные вызовы не разделяют состояние."""

    def test_parallel_apply_matches_sequential(self, oracle: CipherOracle) -> None:
        jobs = [
            (ROUND_TRIP_IDS[i % len(ROUND_TRIP_IDS)], i) for i in range(120)
        ]

        def run(identifier: str, seed: int) -> bytes:
            key, iv, data = _material(identifier)
            data = bytes((b + seed) % 256 for b in data)
            return oracle.apply(
                _request(identifier, Direction.ENCRYPT, key, iv, data)
            ).output

        expected = [run(identifier, seed) for identifier, seed in jobs]
        with ThreadPoolExecutor(max_workers=12) as executor:
            actual = list(executor.map(lambda job: run(*job), jobs))

        assert actual == expected
