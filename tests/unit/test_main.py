"""Unit tests for the uvicorn runner in main.py."""

import pytest
from pytest_mock import MockerFixture, MockType

import main
from src.core.config import Settings


@pytest.fixture
def mock_uvicorn(mocker: MockerFixture) -> MockType:
    return mocker.patch("main.uvicorn.run")


@pytest.fixture
def runner_settings(mocker: MockerFixture, mock_settings: Settings) -> Settings:
    mocker.patch("main.get_settings", return_value=mock_settings)
    mocker.patch("main.setup_logging")
    return mock_settings


@pytest.mark.unit
class TestMain:
    def test_runs_app_import_string(
        self, mock_uvicorn: MockType, runner_settings: Settings
    ) -> None:
        main.main()

        mock_uvicorn.assert_called_once_with(
            "src.api.main:app",
            host="127.0.0.1",
            port=3000,
            reload=False,
            log_config=main.UVICORN_LOG_CONFIG,
        )

    @pytest.mark.parametrize(
        ("env_port", "expected_port"),
        [("8080", 8080), (None, 3000)],
    )
    def test_port_precedence(
        self,
        mock_uvicorn: MockType,
        runner_settings: Settings,
        monkeypatch: pytest.MonkeyPatch,
        env_port: str | None,
        expected_port: int,
    ) -> None:
        if env_port is None:
            monkeypatch.delenv("PORT", raising=False)
        else:
            monkeypatch.setenv("PORT", env_port)

        main.main()

        assert mock_uvicorn.call_args.kwargs["port"] == expected_port

    def test_reload_follows_debug(
        self, mocker: MockerFixture, mock_uvicorn: MockType, mock_settings: Settings
    ) -> None:
        mocker.patch(
            "main.get_settings",
            return_value=mock_settings.model_copy(update={"debug": True}),
        )
        mocker.patch("main.setup_logging")

        main.main()

        assert mock_uvicorn.call_args.kwargs["reload"] is True

    def test_uvicorn_loggers_are_intercepted(self) -> None:
        config = main.UVICORN_LOG_CONFIG

        handler = config["handlers"]["default"]
        assert handler["class"] == "src.core.logging.InterceptHandler"
        assert set(config["loggers"]) == {"uvicorn", "uvicorn.error", "uvicorn.access"}
