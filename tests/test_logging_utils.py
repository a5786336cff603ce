from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

from vfs_optrack import logging_utils
from vfs_optrack.config import LoggingSettings


@patch("vfs_optrack.logging_utils.logging.basicConfig")
def test_configure_logging_stream_only(mock_basic_config: MagicMock) -> None:
    logging_utils.configure_logging(LoggingSettings(level="INFO", file=None))

    kwargs = mock_basic_config.call_args.kwargs
    assert kwargs["force"] is True
    assert kwargs["level"] == logging.INFO
    assert len(kwargs["handlers"]) == 1


@patch("vfs_optrack.logging_utils.logging.basicConfig")
def test_configure_logging_with_file(mock_basic_config: MagicMock, tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "optrack.log"

    logging_utils.configure_logging(LoggingSettings(level="debug", file=str(log_file)))

    kwargs = mock_basic_config.call_args.kwargs
    assert kwargs["level"] == logging.DEBUG
    assert len(kwargs["handlers"]) == 2
    assert log_file.parent.is_dir()
    for handler in kwargs["handlers"]:
        handler.close()


@patch("vfs_optrack.logging_utils.logging.basicConfig")
def test_configure_logging_unknown_level_falls_back_to_info(
    mock_basic_config: MagicMock,
) -> None:
    logging_utils.configure_logging(LoggingSettings(level="chatty"))

    assert mock_basic_config.call_args.kwargs["level"] == logging.INFO


@patch("vfs_optrack.logging_utils.logging.basicConfig")
@patch("vfs_optrack.logging_utils.logging.FileHandler", side_effect=OSError("permission denied"))
@patch("vfs_optrack.logging_utils._logger")
def test_configure_logging_file_handler_error(
    mock_logger: MagicMock,
    _mock_file_handler: MagicMock,
    mock_basic_config: MagicMock,
    tmp_path: Path,
) -> None:
    logging_utils.configure_logging(LoggingSettings(file=str(tmp_path / "app.log")))

    mock_logger.warning.assert_called_once()
    assert len(mock_basic_config.call_args.kwargs["handlers"]) == 1


@patch("vfs_optrack.logging_utils.load_settings")
@patch("vfs_optrack.logging_utils.logging.basicConfig")
def test_configure_logging_reads_settings_when_not_given(
    _mock_basic_config: MagicMock,
    mock_load_settings: MagicMock,
) -> None:
    mock_load_settings.return_value.logging = LoggingSettings()

    logging_utils.configure_logging()

    mock_load_settings.assert_called_once()
