import dataclasses
import os
from unittest.mock import patch

import pytest

from pulse.config import Config
from pulse.constants import DEFAULT_HOST, DEFAULT_QUEUE_SIZE, ENV_HOST, ENV_RELEASE
from pulse.errors import ConfigError, InitializationError, InvalidSampleRate, MissingField


@pytest.mark.unit
class TestConfig:
    """
    Validation of the client configuration.
    """

    @pytest.mark.parametrize("rate", [0.0, 0.25, 0.5, 1.0, 0, 1])
    def test_valid_sample_rates(self, rate):
        config = Config(public_key="key", project_id="1", traces_sample_rate=rate)
        assert config.traces_sample_rate == rate

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config(public_key="key", project_id="1")

        assert config.traces_sample_rate == 1.0
        assert config.host == DEFAULT_HOST
        assert config.release is None
        assert config.attach_stacktrace is True
        assert config.queue_size == DEFAULT_QUEUE_SIZE

    @pytest.mark.parametrize(
        "public_key, project_id, missing",
        [
            (None, "1", "public_key"),
            ("", "1", "public_key"),
            ("   ", "1", "public_key"),
            ("key", None, "project_id"),
            ("key", "", "project_id"),
        ],
    )
    def test_missing_fields(self, public_key, project_id, missing):
        with pytest.raises(MissingField) as exc_info:
            Config(public_key=public_key, project_id=project_id)

        assert exc_info.value.name == missing
        assert missing in str(exc_info.value)

    @pytest.mark.parametrize(
        "rate", [-0.01, 1.01, 2, float("nan"), float("inf"), "0.5", None, True]
    )
    def test_invalid_sample_rates(self, rate):
        with pytest.raises(InvalidSampleRate):
            Config(public_key="key", project_id="1", traces_sample_rate=rate)

    def test_error_hierarchy(self):
        assert issubclass(MissingField, ConfigError)
        assert issubclass(InvalidSampleRate, ConfigError)
        assert issubclass(ConfigError, InitializationError)

    def test_is_immutable(self):
        config = Config(public_key="key", project_id="1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.project_id = "2"

    def test_store_url(self):
        config = Config(public_key="key", project_id="42", host="events.example.com")
        assert config.store_url == "https://events.example.com/api/42/store/"

    def test_environment_overrides(self):
        with patch.dict(
            os.environ, {ENV_HOST: "self-hosted.example.com", ENV_RELEASE: "app@1.2.3"}
        ):
            config = Config(public_key="key", project_id="1")

        assert config.host == "self-hosted.example.com"
        assert config.release == "app@1.2.3"

    def test_as_dict_masks_public_key(self):
        config = Config(public_key="abcdef123456", project_id="1")
        data = config.as_dict()
        assert "abcdef123456" not in str(data)
        assert data["public_key"].startswith("abcd")

    @pytest.mark.parametrize("queue_size", [0, -1])
    def test_rejects_non_positive_queue_size(self, queue_size):
        with pytest.raises(ValueError):
            Config(public_key="key", project_id="1", queue_size=queue_size)
