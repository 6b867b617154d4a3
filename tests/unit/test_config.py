"""Unit tests for settings loading."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from rentledger.config import Settings


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        for name in (
            "DEFAULT_WATER_RATE",
            "DEFAULT_ELECTRICITY_RATE",
            "PENALTY_RATE",
            "DUE_DAYS",
            "IMPORT_DUE_DAY",
            "AUTO_CONFIRM_PAYMENTS",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.default_water_rate == Decimal("30")
        assert settings.default_electricity_rate == Decimal("8")
        assert settings.penalty_rate == Decimal("0.10")
        assert settings.due_days == 30
        assert settings.import_due_day == 15
        assert settings.auto_confirm_payments is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PENALTY_RATE", "0.05")
        monkeypatch.setenv("AUTO_CONFIRM_PAYMENTS", "true")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")

        settings = Settings(_env_file=None)

        assert settings.penalty_rate == Decimal("0.05")
        assert settings.auto_confirm_payments is True
        assert settings.database_url == "sqlite:///./other.db"

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DUE_DAYS", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("DUE_DAYS=14\nUNRELATED_SETTING=ignored\n")

        settings = Settings(_env_file=str(env_file))

        assert settings.due_days == 14

    @pytest.mark.parametrize("name,value", [("IMPORT_DUE_DAY", "31"), ("PENALTY_RATE", "-0.1")])
    def test_out_of_range_rejected(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
