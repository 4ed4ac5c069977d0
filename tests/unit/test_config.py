"""
Unit tests for EncoderConfig.
"""

import logging

import pytest

from httpencoder import from_config
from httpencoder.codings import DeflateCoding, GzipCoding, IdentityCoding
from httpencoder.config import EncoderConfig


class TestFromEnv:
    def test_defaults(self, monkeypatch):
        for name in ("HTTPENCODER_ENCODINGS", "HTTPENCODER_DECODINGS",
                     "HTTPENCODER_LEVEL", "HTTPENCODER_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = EncoderConfig.from_env()

        assert config == EncoderConfig()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("HTTPENCODER_ENCODINGS", " GZip ,, ")
        monkeypatch.setenv("HTTPENCODER_DECODINGS", "deflate,identity")
        monkeypatch.setenv("HTTPENCODER_LEVEL", "9")
        monkeypatch.setenv("HTTPENCODER_LOG_LEVEL", "DEBUG")

        config = EncoderConfig.from_env()

        assert config.encodings == ("gzip",)
        assert config.decodings == ("deflate", "identity")
        assert config.compress_level == 9
        assert config.log_level == "DEBUG"

    def test_empty_disables_stage(self, monkeypatch):
        monkeypatch.setenv("HTTPENCODER_ENCODINGS", "")
        assert EncoderConfig.from_env().encodings == ()


class TestValidate:
    def test_defaults_are_valid(self):
        EncoderConfig().validate()

    def test_unknown_coding(self):
        with pytest.raises(ValueError, match="Unknown coding: 'br'"):
            EncoderConfig(encodings=("gzip", "br")).validate()

    def test_unknown_decoding(self):
        with pytest.raises(ValueError, match="Unknown coding"):
            EncoderConfig(decodings=("zstd",)).validate()

    @pytest.mark.parametrize("level", [0, 10])
    def test_level_range(self, level):
        with pytest.raises(ValueError, match="compress_level"):
            EncoderConfig(compress_level=level).validate()

    def test_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            EncoderConfig(log_level="LOUD").validate()


class TestRegistries:
    def test_build_registries(self):
        encoders, decoders = EncoderConfig(compress_level=3).build_registries()

        assert isinstance(encoders["gzip"], GzipCoding)
        assert encoders["gzip"].level == 3
        assert isinstance(encoders["deflate"], DeflateCoding)
        assert isinstance(decoders["identity"], IdentityCoding)

    def test_from_config(self, make_request, recorder, echo_handler):
        import gzip

        wrap = from_config(EncoderConfig(encodings=("gzip",), decodings=()))
        wrap(echo_handler)(recorder, make_request(b"hi", {"Accept-Encoding": "gzip, deflate"}))

        response = recorder.result()
        assert response.headers["Content-Encoding"] == "gzip"
        assert gzip.decompress(response.body) == b"hi"


def test_setup_logging():
    logger = logging.getLogger("httpencoder")
    previous = logger.level
    try:
        EncoderConfig(log_level="debug").setup_logging()
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(previous)
