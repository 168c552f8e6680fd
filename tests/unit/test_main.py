"""Unit tests for the root main.py entry point."""

import pytest
from pytest_mock import MockerFixture

import main


@pytest.mark.unit
class TestMain:
    """Test suite for the uvicorn launcher."""

    def test_runs_the_app_factory(
        self, mocker: MockerFixture, clean_env: pytest.MonkeyPatch
    ) -> None:
        """Test uvicorn is started with the factory and settings values."""
        clean_env.delenv("PORT", raising=False)
        mocker.patch("main.setup_logging")
        mock_run = mocker.patch("main.uvicorn.run")

        main.main()

        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args == ("src.api.main:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8000
        assert kwargs["reload"] is True

    def test_port_environment_variable(
        self, mocker: MockerFixture, clean_env: pytest.MonkeyPatch
    ) -> None:
        """Test PORT overrides the configured port."""
        clean_env.setenv("PORT", "9090")
        clean_env.setenv("DEBUG", "false")
        mocker.patch("main.setup_logging")
        mock_run = mocker.patch("main.uvicorn.run")

        main.main()

        assert mock_run.call_args.kwargs["port"] == 9090
        assert mock_run.call_args.kwargs["reload"] is False

    def test_uvicorn_loggers_are_intercepted(self) -> None:
        """Test every uvicorn logger goes through the intercept handler."""
        config = main.uvicorn_log_config()

        assert config["handlers"] == {
            "default": {"class": "src.core.logging.InterceptHandler"}
        }
        assert set(config["loggers"]) == {  # type: ignore[arg-type]
            "uvicorn",
            "uvicorn.error",
            "uvicorn.access",
        }
