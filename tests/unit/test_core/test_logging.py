"""
test_logging.py - 로깅 설정 테스트
"""

import logging

from driveplacer.core.logging import configure_logging, mask_secret


class TestConfigureLogging:
    """configure_logging 함수 테스트."""

    def test_sets_package_level(self):
        configure_logging("DEBUG")

        assert logging.getLogger("driveplacer").level == logging.DEBUG

        configure_logging("INFO")
        assert logging.getLogger("driveplacer").level == logging.INFO

    def test_unknown_level_falls_back_to_info(self):
        configure_logging("chatty")

        assert logging.getLogger("driveplacer").level == logging.INFO

    def test_discovery_cache_quieted(self):
        configure_logging("DEBUG")

        assert logging.getLogger("googleapiclient.discovery_cache").level == logging.ERROR


class TestMaskSecret:
    """mask_secret 함수 테스트."""

    def test_masks_long_value(self):
        assert mask_secret("ya29.abcdefgh") == "ya29…(13)"

    def test_short_value_fully_masked(self):
        assert mask_secret("abc") == "***"

    def test_none(self):
        assert mask_secret(None) == "<none>"
        assert mask_secret("") == "<none>"
