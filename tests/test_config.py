"""Tests for credential lookup and pipeline config loading."""

from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

from shotlist.config import get_credential, load_credentials, load_pipeline_config


class TestGetCredential:
    @patch("shotlist.config.keyring.get_password", return_value="key-from-keyring")
    def test_from_keyring(self, mock_keyring):
        assert get_credential("gemini") == "key-from-keyring"
        mock_keyring.assert_called_once_with("shotlist", "gemini_api_key")

    @patch("shotlist.config.keyring.get_password", return_value=None)
    def test_from_env_var(self, mock_keyring):
        with patch.dict(os.environ, {"GETTY_API_SECRET": "secret-from-env"}):
            assert get_credential("getty-secret") == "secret-from-env"

    @patch("shotlist.config.keyring.get_password", return_value=None)
    def test_neither_raises(self, mock_keyring):
        env = {k: v for k, v in os.environ.items() if k != "GETTY_API_KEY"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(RuntimeError, match="shotlist config set-key getty-key"):
                get_credential("getty-key")

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            get_credential("openai")

    @patch("shotlist.config.keyring.get_password", side_effect=lambda service, key: f"{key}-value")
    def test_load_credentials(self, mock_keyring):
        credentials = load_credentials()
        assert credentials.gemini_api_key == "gemini_api_key-value"
        assert credentials.getty_api_key == "getty_api_key-value"
        assert credentials.getty_api_secret == "getty_api_secret-value"


class TestLoadPipelineConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_pipeline_config(tmp_path / "nope.json")
        assert config.gemini_model == "gemini-2.5-flash"
        assert config.inter_entity_delay == 1.0
        assert config.default_filter().collection_codes == "blb,wom,rol,tho,vrt"
        assert config.default_filter().use_pmcarc is True

    def test_file_values_override(self, tmp_path):
        path = tmp_path / "shotlist_config.json"
        path.write_text(
            json.dumps(
                {
                    "inter_entity_delay": 0.25,
                    "collections": {"variety": True},
                    "use_pmcarc": False,
                    "unrelated": "ignored",
                }
            )
        )
        config = load_pipeline_config(path)
        assert config.inter_entity_delay == 0.25
        assert config.default_filter().collection_codes == "vrt"
        assert config.default_filter().use_pmcarc is False

    def test_default_filter_is_independent_copy(self):
        config = load_pipeline_config(None)
        filter_config = config.default_filter()
        filter_config.set_all_collections(False)
        assert all(config.collections.values())
