import pytest
from pydantic import ValidationError

from statsectors.config.settings import DEFAULT_CONFIG_PATH, Settings, load_config


def test_defaults():
    settings = Settings()

    assert settings.attributes.sector_code == "Cs012011"
    assert settings.attributes.labels == {"nl": "Sector_nl", "fr": "Sector_fr"}
    assert [link.attribute for link in settings.attributes.containment] == ["Nuts3_new", "Nis_012011"]
    assert settings.identifiers.suffix == "#id"
    assert settings.output.format == "nt"
    assert settings.paths.shapes_file.exists()


def test_bundled_yaml_matches_defaults():
    assert load_config(DEFAULT_CONFIG_PATH).model_dump() == Settings().model_dump()


def test_yaml_overrides(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(
        """
namespaces:
  nis: "http://example.org/sector/"
attributes:
  sector_code: "CS_CODE"
  containment:
    - attribute: "MUNI"
      namespace: "http://example.org/municipality/"
      normalize: true
      suffix: "#id"
output:
  format: "turtle"
""",
        encoding="utf-8",
    )

    settings = load_config(config)

    assert settings.namespaces.nis == "http://example.org/sector/"
    assert settings.namespaces.nuts == "http://nuts.geovocab.org/id/"
    assert settings.attributes.sector_code == "CS_CODE"
    assert settings.attributes.containment[0].suffix == "#id"
    assert settings.output.format == "turtle"


def test_empty_yaml(tmp_path):
    config = tmp_path / "empty.yaml"
    config.write_text("", encoding="utf-8")
    assert load_config(config).output.format == "nt"


def test_environment_override(monkeypatch):
    monkeypatch.setenv("STATSECTORS_OUTPUT__FORMAT", "json-ld")
    monkeypatch.setenv("STATSECTORS_IDENTIFIERS__PERCENT_ENCODE", "true")

    settings = Settings()

    assert settings.output.format == "json-ld"
    assert settings.identifiers.percent_encode is True


def test_unknown_format_rejected(tmp_path):
    config = tmp_path / "bad.yaml"
    config.write_text("output:\n  format: csv\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_config(config)


def test_environment_overrides_yaml(monkeypatch):
    monkeypatch.setenv("STATSECTORS_OUTPUT__FORMAT", "turtle")
    monkeypatch.setenv("STATSECTORS_IDENTIFIERS__PERCENT_ENCODE", "true")

    settings = load_config()

    assert settings.output.format == "turtle"
    assert settings.identifiers.percent_encode is True
    assert settings.identifiers.suffix == "#id"
    assert settings.attributes.sector_code == "Cs012011"
