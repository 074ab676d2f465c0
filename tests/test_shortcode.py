"""Tests for short code generation."""

from linkmon.shortcode import ShortCodeGenerator
from linkmon.common.validators import is_valid_short_code


class TestShortCodeGenerator:
    """Test short code generation."""

    def test_generate_random(self):
        """Test random code generation."""
        generator = ShortCodeGenerator(default_length=6)

        code = generator.generate_random()
        assert len(code) == 6
        assert generator.is_valid_format(code)

    def test_generate_random_custom_length(self):
        """Test random code with custom length."""
        generator = ShortCodeGenerator(default_length=6)

        code = generator.generate_random(length=10)
        assert len(code) == 10
        assert generator.is_valid_format(code)

    def test_generate_from_uuid(self):
        """Test UUID-based generation."""
        generator = ShortCodeGenerator(default_length=8)

        code = generator.generate_from_uuid()
        assert len(code) == 8
        assert generator.is_valid_format(code)

    def test_random_codes_differ(self):
        """Random codes are not repeated in a small sample."""
        generator = ShortCodeGenerator()

        codes = {generator.generate_random() for _ in range(200)}
        assert len(codes) == 200

    def test_generated_codes_pass_validation(self):
        """Generated codes are always acceptable as custom codes."""
        generator = ShortCodeGenerator()

        for _ in range(50):
            valid, error = is_valid_short_code(generator.generate_random())
            assert valid, error

    def test_base62_conversion(self):
        """Test base62 encoding."""
        generator = ShortCodeGenerator()

        assert generator._int_to_base62(0) == "a"
        assert generator._int_to_base62(61) == "9"
        assert generator._int_to_base62(62) == "ba"

    def test_is_valid_format(self):
        """Test format validation."""
        assert ShortCodeGenerator.is_valid_format("abc123")
        assert ShortCodeGenerator.is_valid_format("test-code_1")
        assert not ShortCodeGenerator.is_valid_format("test@code")
        assert not ShortCodeGenerator.is_valid_format("test code")
        assert not ShortCodeGenerator.is_valid_format("")
