"""Tests for __main__ entry point."""

from pathlib import Path
from unittest.mock import patch

import pytest

from litho import __main__
from litho.config import Settings
from litho.errors import AuthorizationFailed, SearchError, TokenStoreError
from litho.google_photos.models import YearMonthDay


@pytest.fixture
def settings(temp_dir: Path, sample_config_dict: dict) -> Settings:
    sample_config_dict["sync"]["photos_dir"] = str(temp_dir / "photos")
    return Settings(**sample_config_dict)


class TestBuildAuthority:
    def test_uses_oauth_settings(self, settings: Settings):
        authority = __main__.build_authority(settings)
        assert authority.client_id == "myclientid"
        assert authority.client_secret == "myclientsecret"
        assert authority.token_endpoint == "https://oauth2.googleapis.com/token"
        assert authority.redirect_uri == "http://localhost:7878"


class TestSync:
    @patch("litho.__main__.run_pipeline")
    @patch("litho.__main__.get_access_token")
    @patch("litho.__main__.TokenStore")
    @patch("litho.__main__.default_account", return_value="alice")
    def test_sync_wires_components(
        self, mock_account, mock_store_class, mock_get_token, mock_run, settings: Settings
    ):
        mock_get_token.return_value = "access"
        mock_run.return_value = 1234
        photos = settings.sync.photos_dir
        (photos / "2023" / "09" / "30").mkdir(parents=True)

        written = __main__.sync(settings, limit=10, clear_token=True)

        assert written == 1234
        mock_store_class.assert_called_once_with("myclientid")
        args, kwargs = mock_get_token.call_args
        assert args[1] is mock_store_class.return_value
        assert args[2] == "alice"
        assert kwargs["clear"] is True

        fetcher, writer, limit = mock_run.call_args[0]
        assert limit == 10
        assert fetcher.date_range.start == YearMonthDay(2023, 9, 30)
        assert fetcher._headers["Authorization"] == "Bearer access"
        assert fetcher.page_size == 25
        assert writer.root == photos

    @patch("litho.__main__.run_pipeline", return_value=0)
    @patch("litho.__main__.get_access_token", return_value="access")
    @patch("litho.__main__.TokenStore")
    def test_creates_photos_dir(self, mock_store, mock_token, mock_run, settings: Settings):
        assert not settings.sync.photos_dir.exists()
        __main__.sync(settings)
        assert settings.sync.photos_dir.is_dir()
        fetcher = mock_run.call_args[0][0]
        assert fetcher.date_range.start == YearMonthDay(1970, 1, 1)


class TestMain:
    """Test main function."""

    def test_main_config_not_found(self, temp_dir: Path, capsys):
        nonexistent_config = temp_dir / "nonexistent.yaml"

        result = __main__.main(["--config", str(nonexistent_config)])

        assert result == 1
        captured = capsys.readouterr()
        assert "Configuration file not found" in captured.err

    def test_main_invalid_config(self, temp_dir: Path, capsys):
        config = temp_dir / "bad.yaml"
        config.write_text("oauth:\n  client_id: x\n")

        result = __main__.main(["--config", str(config)])

        assert result == 1
        assert "Invalid configuration" in capsys.readouterr().err

    @patch("litho.__main__.sync", return_value=42)
    def test_main_success(self, mock_sync, sample_config_yaml: Path):
        result = __main__.main(["5", "--config", str(sample_config_yaml)])

        assert result == 0
        settings, limit, clear = mock_sync.call_args[0]
        assert isinstance(settings, Settings)
        assert limit == 5
        assert clear is False

    @patch("litho.__main__.sync", return_value=0)
    def test_main_unlimited_and_clear(self, mock_sync, sample_config_yaml: Path):
        __main__.main(["--config", str(sample_config_yaml), "--clear-token"])

        _, limit, clear = mock_sync.call_args[0]
        assert limit is None
        assert clear is True

    @patch("litho.__main__.sync", return_value=0)
    def test_clear_token_env(self, mock_sync, sample_config_yaml: Path, monkeypatch):
        monkeypatch.setenv("CLEAR_TOKEN", "1")
        __main__.main(["--config", str(sample_config_yaml)])
        assert mock_sync.call_args[0][2] is True

    @patch("litho.__main__.sync", return_value=0)
    def test_clear_token_env_empty(self, mock_sync, sample_config_yaml: Path, monkeypatch):
        monkeypatch.setenv("CLEAR_TOKEN", "")
        __main__.main(["--config", str(sample_config_yaml)])
        assert mock_sync.call_args[0][2] is True

    @patch("litho.__main__.sync", return_value=0)
    def test_clear_token_env_unset(self, mock_sync, sample_config_yaml: Path, monkeypatch):
        monkeypatch.delenv("CLEAR_TOKEN", raising=False)
        __main__.main(["--config", str(sample_config_yaml)])
        assert mock_sync.call_args[0][2] is False

    @patch("litho.__main__.sync")
    def test_main_keyring_unavailable(self, mock_sync, sample_config_yaml: Path):
        mock_sync.side_effect = TokenStoreError("Cannot read token from keyring: no backend")
        assert __main__.main(["--config", str(sample_config_yaml)]) == 1

    @patch("litho.__main__.sync")
    def test_main_litho_error(self, mock_sync, sample_config_yaml: Path):
        mock_sync.side_effect = SearchError(403, "PERMISSION_DENIED")
        assert __main__.main(["--config", str(sample_config_yaml)]) == 1

    @patch("litho.__main__.sync")
    def test_main_authorization_failed(self, mock_sync, sample_config_yaml: Path):
        mock_sync.side_effect = AuthorizationFailed("no code")
        assert __main__.main(["--config", str(sample_config_yaml)]) == 1

    @patch("litho.__main__.sync")
    def test_main_interrupted(self, mock_sync, sample_config_yaml: Path):
        mock_sync.side_effect = KeyboardInterrupt
        assert __main__.main(["--config", str(sample_config_yaml)]) == 130

    def test_negative_number_rejected(self):
        with pytest.raises(SystemExit):
            __main__.main(["-3"])

    @patch("litho.__main__.sync", return_value=0)
    def test_env_only_settings(self, mock_sync, monkeypatch, temp_dir: Path):
        monkeypatch.setenv("LITHO_OAUTH__CLIENT_ID", "envid")
        monkeypatch.setenv("LITHO_OAUTH__CLIENT_SECRET", "envsecret")
        monkeypatch.setenv("LITHO_SYNC__PHOTOS_DIR", str(temp_dir / "p"))

        assert __main__.main([]) == 0
        settings = mock_sync.call_args[0][0]
        assert settings.oauth.client_id == "envid"

    def test_unexpected_error_not_swallowed(self, sample_config_yaml: Path):
        with patch("litho.__main__.sync", side_effect=RuntimeError("bug")):
            with pytest.raises(RuntimeError):
                __main__.main(["--config", str(sample_config_yaml)])
