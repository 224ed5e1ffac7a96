import logging

from statsectors.utils.logging import (
    ColoredFormatter,
    PlainFormatter,
    add_file_handler,
    remove_file_handler,
    setup_colored_logging,
    strip_ansi_codes,
)


def make_record(name, level, message):
    return logging.LogRecord(name, level, __file__, 1, message, None, None)


def test_colored_formatter_uses_component_theme():
    record = make_record("statsectors.triples.mapper", logging.INFO, "Mapped 3 features")

    line = ColoredFormatter().format(record)

    assert "🔗" in line
    assert "mapper" in line
    assert line.endswith("Mapped 3 features")


def test_colored_formatter_fallback_and_warning_color():
    record = make_record("pyshacl", logging.WARNING, "careful")

    line = ColoredFormatter().format(record)

    assert "•" in line
    assert f"{ColoredFormatter.COLORS['WARNING']}careful{ColoredFormatter.RESET}" in line


def test_plain_formatter_has_no_escape_codes():
    record = make_record("statsectors.pipeline", logging.ERROR, "\033[31mConversion failed\033[0m")

    line = PlainFormatter().format(record)

    assert "\033[" not in line
    assert line.endswith("| ERROR    | pipeline     | Conversion failed")


def test_strip_ansi_codes():
    assert strip_ansi_codes("\033[1;33mhello\033[0m") == "hello"


def test_setup_logs_to_stderr(capsys):
    setup_colored_logging(level=logging.INFO)

    logging.getLogger("statsectors.pipeline").info("--- STAGE 1 ---")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "STAGE 1" in captured.err


def test_file_handler_round_trip(tmp_path):
    setup_colored_logging(level=logging.DEBUG)
    log_file = tmp_path / "nested" / "run.log"

    handler = add_file_handler(log_file)
    logging.getLogger("statsectors.loaders.shapefile_loader").debug("Opened sectors.shp")
    remove_file_handler()

    assert handler not in logging.getLogger().handlers
    text = log_file.read_text(encoding="utf-8")
    assert "File logging enabled" in text
    assert "Opened sectors.shp" in text
