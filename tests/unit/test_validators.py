# PATH: tests/unit/test_validators.py
"""
Tests for address and amount validators.
"""

import unittest

from core.constants import ErrorCode, NATIVE_TOKEN, ZERO_ADDRESS
from core.exceptions import StructuralError
from core.validators import (
    is_native,
    is_valid_address,
    is_zero_address,
    normalize_address,
    validate_amount,
)


class TestIsValidAddress(unittest.TestCase):
    """Tests for is_valid_address."""

    def test_valid_address(self):
        """Valid address returns True."""
        self.assertTrue(is_valid_address("0x1234567890abcdef1234567890abcdef12345678"))
        self.assertTrue(is_valid_address("0xABCDEF1234567890ABCDEF1234567890ABCDEF12"))

    def test_invalid_address_no_prefix(self):
        """Address without 0x prefix is invalid."""
        self.assertFalse(is_valid_address("1234567890abcdef1234567890abcdef12345678"))

    def test_invalid_address_wrong_length(self):
        """Address with wrong length is invalid."""
        self.assertFalse(is_valid_address("0x1234"))
        self.assertFalse(is_valid_address("0x" + "a" * 50))

    def test_invalid_address_non_hex(self):
        """Address with non-hex chars is invalid."""
        self.assertFalse(is_valid_address("0x" + "G" * 40))

    def test_non_string_input(self):
        """Non-string input returns False (YAML turns bare 0x... into ints)."""
        self.assertFalse(is_valid_address(None))
        self.assertFalse(is_valid_address(0x1234567890ABCDEF1234567890ABCDEF12345678))


class TestNormalizeAddress(unittest.TestCase):

    def test_lowercases(self):
        self.assertEqual(
            normalize_address("0xABCDEF1234567890ABCDEF1234567890ABCDEF12"),
            "0xabcdef1234567890abcdef1234567890abcdef12",
        )

    def test_invalid_raises_structural(self):
        with self.assertRaises(StructuralError) as ctx:
            normalize_address("0x1234")
        self.assertEqual(ctx.exception.code, ErrorCode.INVALID_ADDRESS)
        self.assertEqual(ctx.exception.details["address"], "0x1234")


class TestSentinels(unittest.TestCase):

    def test_zero_address(self):
        self.assertTrue(is_zero_address(ZERO_ADDRESS))
        self.assertFalse(is_zero_address(NATIVE_TOKEN))

    def test_native_any_case(self):
        self.assertTrue(is_native(NATIVE_TOKEN.upper().replace("0X", "0x")))
        self.assertFalse(is_native(ZERO_ADDRESS))


class TestValidateAmount(unittest.TestCase):

    def test_accepts_zero_and_large(self):
        self.assertEqual(validate_amount(0), 0)
        self.assertEqual(validate_amount(2**256 - 1), 2**256 - 1)

    def test_rejects_negative(self):
        with self.assertRaises(StructuralError) as ctx:
            validate_amount(-1, "input_amount")
        self.assertEqual(ctx.exception.code, ErrorCode.INVALID_AMOUNT)
        self.assertEqual(ctx.exception.details["field"], "input_amount")

    def test_rejects_above_uint256(self):
        with self.assertRaises(StructuralError) as ctx:
            validate_amount(2**256, "nonce")
        self.assertEqual(ctx.exception.code, ErrorCode.INVALID_AMOUNT)

    def test_rejects_float_and_bool(self):
        for value in (1.5, True, "10"):
            with self.assertRaises(StructuralError):
                validate_amount(value)


if __name__ == "__main__":
    unittest.main()
