"""Tests for configuration loading and settings."""

from pathlib import Path

import pytest

from loadsheet.core.config import (
    BackendSettings,
    ConfigError,
    ConfigLoader,
    GenerationSettings,
    LoadsheetSettings,
)
from loadsheet.weight_balance import A320_CONSTANTS, A320_LIMITS

PROJECT_CONFIG = Path(__file__).parent.parent.parent / "config" / "loadsheet.yaml"


class TestConfigLoader:
    """Test the YAML configuration loader."""

    def test_load(self, tmp_path) -> None:
        path = tmp_path / "loadsheet.yaml"
        path.write_text("backend:\n  base_url: http://localhost:5000/efb\n")

        config = ConfigLoader.load(path)

        assert config.get("backend.base_url") == "http://localhost:5000/efb"

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader.load(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("backend: [unclosed")

        with pytest.raises(ConfigError):
            ConfigLoader.load(path)

    def test_root_must_be_mapping(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ConfigError, match="mapping"):
            ConfigLoader.load(path)

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ConfigLoader.load(path).to_dict() == {}

    def test_get_with_default(self) -> None:
        config = ConfigLoader({"generation": {"max_retries": 5}})

        assert config.get("generation.max_retries") == 5
        assert config.get("generation.poll_interval", default=1.0) == 1.0
        assert config.get("generation.max_retries.value") is None

    def test_get_section(self) -> None:
        config = ConfigLoader({"backend": {"base_url": "x"}, "name": "A320"})

        assert config.get_section("backend") == {"base_url": "x"}
        assert config.get_section("generation") == {}
        with pytest.raises(ConfigError):
            config.get_section("name")

    def test_merge(self) -> None:
        """Test that nested sections merge and the override wins."""
        base = ConfigLoader({"backend": {"base_url": "a", "request_timeout": 10}})
        base.merge(ConfigLoader({"backend": {"base_url": "b"}, "estimation": {"seed": 1}}))

        assert base.to_dict() == {
            "backend": {"base_url": "b", "request_timeout": 10},
            "estimation": {"seed": 1},
        }


class TestGenerationSettings:
    """Test retry settings."""

    def test_linear_backoff(self) -> None:
        settings = GenerationSettings(backoff_unit=2.0)

        assert [settings.backoff_delay(n) for n in (1, 2, 3)] == [2.0, 4.0, 6.0]

    def test_exponential_backoff(self) -> None:
        settings = GenerationSettings(backoff_strategy="exponential")

        assert [settings.backoff_delay(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ConfigError):
            GenerationSettings(backoff_strategy="fibonacci")

    def test_negative_retries(self) -> None:
        with pytest.raises(ConfigError):
            GenerationSettings(max_retries=-1)

    def test_seat_count_defaults_to_cabin(self) -> None:
        """Test that the seat count is left to the cabin layout unless configured."""
        assert GenerationSettings().seat_count is None
        assert GenerationSettings(seat_count=180).seat_count == 180

    @pytest.mark.parametrize("seat_count", [0, -10])
    def test_invalid_seat_count(self, seat_count) -> None:
        with pytest.raises(ConfigError):
            GenerationSettings(seat_count=seat_count)


class TestLoadsheetSettings:
    """Test building settings from configuration."""

    def test_defaults(self) -> None:
        settings = LoadsheetSettings.from_config(ConfigLoader({}))

        assert settings.backend == BackendSettings()
        assert settings.generation.max_retries == 3
        assert settings.estimation.seed is None
        assert settings.aircraft == A320_CONSTANTS
        assert settings.limits == A320_LIMITS

    def test_sections(self) -> None:
        config = ConfigLoader(
            {
                "backend": {"base_url": "http://backend.test", "health_timeout": 2},
                "generation": {"max_retries": 1, "backoff_strategy": "exponential"},
                "estimation": {"seed": 42},
                "limits": {"max_zfw": 64300, "max_tow": 79000, "max_law": 67400},
            }
        )

        settings = LoadsheetSettings.from_config(config)

        assert settings.backend.base_url == "http://backend.test"
        assert settings.backend.health_timeout == 2
        assert settings.generation.max_retries == 1
        assert settings.estimation.seed == 42
        assert settings.limits.max_zfw == 64300.0

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="Invalid configuration"):
            LoadsheetSettings.from_config(ConfigLoader({"backend": {"hostname": "x"}}))

    def test_incomplete_limits(self) -> None:
        with pytest.raises(ConfigError, match="Missing configuration key"):
            LoadsheetSettings.from_config(ConfigLoader({"limits": {"max_zfw": 62500}}))

    def test_project_config(self) -> None:
        """Test that the shipped configuration loads."""
        settings = LoadsheetSettings.from_config(ConfigLoader.load(PROJECT_CONFIG))

        assert settings.aircraft == A320_CONSTANTS
        assert settings.limits == A320_LIMITS
