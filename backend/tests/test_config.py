"""
iShop Payments Backend — Settings Tests
=========================================
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from ishop.config import Settings


class TestSettings:

    def test_secret_is_not_in_repr(self):
        s = Settings(razorpay_key_id="rzp_live_ABCDEFGH", razorpay_secret="very-secret-value")
        assert "very-secret-value" not in repr(s)
        assert "very-secret-value" not in str(s.model_dump())

    def test_masked_key_id_keeps_last_four(self):
        s = Settings(razorpay_key_id="rzp_live_ABCDEFGH")
        assert s.masked_key_id == "*************EFGH"

    def test_masked_key_id_when_unset(self):
        assert Settings(razorpay_key_id="").masked_key_id == "<unset>"

    def test_currency_is_upper_cased(self):
        assert Settings(payment_currency="inr").payment_currency == "INR"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="LOUD")

    def test_missing_credentials_fail_production_check(self):
        s = Settings(razorpay_key_id="", razorpay_secret="")
        with pytest.raises(ValueError) as exc_info:
            s.validate_required_for_production()
        assert "RAZORPAY_KEY_ID" in str(exc_info.value)
        assert "RAZORPAY_SECRET" in str(exc_info.value)

    def test_configured_credentials_pass_production_check(self):
        Settings(razorpay_key_id="rzp_test_1", razorpay_secret="x").validate_required_for_production()

    def test_cors_origins_list(self):
        s = Settings(cors_origins="http://a.test, http://b.test")
        assert s.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_admin_key_defaults_to_unset(self):
        s = Settings()
        assert s.admin_api_key.get_secret_value() == ""

    def test_admin_key_is_not_in_repr(self):
        s = Settings(admin_api_key="admin-k3y")
        assert "admin-k3y" not in repr(s)
