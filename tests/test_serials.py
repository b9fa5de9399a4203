"""
Testes do formato de serial (base-36 + dígito verificador)
"""
import pytest

from eduauth.core.errors import InvalidFormat, SerialOverflowError
from eduauth.services.serials import (
    ALPHABET,
    MAX_SEQUENCE,
    SERIAL_LENGTH,
    checksum_char,
    decode_serial,
    encode_serial,
    normalize_serial,
    validate_serial,
)


class TestEncodeSerial:
    def test_first_sequence(self):
        """Sequência 1 -> payload 000001, soma 1, verificador '1'."""
        assert encode_serial(1) == "0000011"

    def test_zero_is_encodable(self):
        assert encode_serial(0) == "0000000"

    def test_uses_uppercase_base36(self):
        # 35 = 'Z'; soma = 35 * 1 -> 'Z'
        assert encode_serial(35) == "00000ZZ"
        # 36 = '10'; soma = 1*3 + 0*1 = 3
        assert encode_serial(36) == "0000103"

    def test_largest_sequence(self):
        # 35 * (7+3+1+7+3+1) = 770; 770 % 36 = 14 -> 'E'
        assert MAX_SEQUENCE == 36 ** 6 - 1
        assert encode_serial(MAX_SEQUENCE) == "ZZZZZZE"

    def test_deterministic(self):
        assert encode_serial(123456) == encode_serial(123456)

    def test_always_seven_characters(self):
        for n in (1, 36, 1295, 46655, 1679615, 60466175, MAX_SEQUENCE):
            serial = encode_serial(n)
            assert len(serial) == SERIAL_LENGTH
            assert all(ch in ALPHABET for ch in serial)

    def test_overflow_is_refused(self):
        with pytest.raises(SerialOverflowError) as exc:
            encode_serial(MAX_SEQUENCE + 1)
        assert exc.value.status_code == 507
        assert exc.value.details["sequence_number"] == MAX_SEQUENCE + 1

    def test_negative_is_refused(self):
        with pytest.raises(ValueError):
            encode_serial(-1)


class TestValidateSerial:
    def test_valid_serial(self):
        assert validate_serial("0000011") is True

    def test_wrong_check_character(self):
        assert validate_serial("0000012") is False

    @pytest.mark.parametrize("value", ["AB12", "1234567890", "A7K9M3!", "", "000001", "00000111", "000-011", "00000 1", "00000١1", None, 11])
    def test_structural_rejections(self, value):
        assert validate_serial(value) is False

    def test_lowercase_letters_are_accepted(self):
        serial = encode_serial(35)
        assert validate_serial(serial.lower()) is True

    def test_round_trip_sample(self):
        for n in list(range(1, 500)) + [36 ** k for k in range(1, 6)] + [MAX_SEQUENCE]:
            serial = encode_serial(n)
            assert validate_serial(serial), serial
            assert decode_serial(serial) == n

    def test_single_character_corruption(self):
        """
        Troca cada posição por cada um dos outros 35 caracteres.

        Pesos 7 e 1 são coprimos de 36, então qualquer troca nessas posições é
        detectada. Com peso 3 a troca passa quando a diferença é múltiplo de 12:
        dois caracteres por posição, nas duas posições de peso 3.
        """
        for n in (1, 4242, 987654, MAX_SEQUENCE):
            serial = encode_serial(n)
            undetected = []
            for pos in range(SERIAL_LENGTH):
                for ch in ALPHABET:
                    if ch == serial[pos]:
                        continue
                    corrupted = serial[:pos] + ch + serial[pos + 1:]
                    if validate_serial(corrupted):
                        undetected.append((pos, ch))
            assert len(undetected) == 4, (serial, undetected)
            assert {pos for pos, _ in undetected} == {1, 4}


class TestHelpers:
    def test_normalize(self):
        assert normalize_serial("  abc0001 ") == "ABC0001"
        assert normalize_serial(None) == ""

    def test_checksum_char(self):
        assert checksum_char("000001") == "1"
        assert checksum_char("100000") == "7"

    def test_decode_accepts_untrimmed_input(self):
        assert decode_serial(" 0000011 ") == 1

    def test_decode_invalid(self):
        with pytest.raises(InvalidFormat):
            decode_serial("0000012")
