"""
Tests for ConfigLoader

Covers the three flat file formats, staged bundles and resource lookup.
"""

import pytest
from pathlib import Path

from omnisettings.config.loader import ConfigLoader, PropertiesFormatError


@pytest.fixture
def loader(tmp_path: Path) -> ConfigLoader:
    return ConfigLoader(tmp_path)


class TestPropertiesFormat:
    """Tests for plain .properties files."""

    def test_separators_and_comments(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.properties").write_text(
            "# comment\n"
            "! another comment\n"
            "\n"
            "db.host=localhost\n"
            "db.port : 5432\n"
            "app.name   demo\n"
            "  indented = yes \n"
            "empty=\n",
            encoding="utf-8",
        )
        assert loader.load_file("a.properties") == {
            "db.host": "localhost",
            "db.port": "5432",
            "app.name": "demo",
            "indented": "yes ",
            "empty": "",
        }

    def test_line_continuation(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.properties").write_text(
            "hosts=a,\\\n"
            "      b,\\\n"
            "      c\n",
            encoding="utf-8",
        )
        assert loader.load_file("a.properties") == {"hosts": "a,b,c"}

    def test_escapes(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.properties").write_text(
            "key\\ with\\ spaces=tab\\there\n"
            "unicode=caf\\u00e9\n"
            "path=C:\\\\temp\n",
            encoding="utf-8",
        )
        assert loader.load_file("a.properties") == {
            "key with spaces": "tab\there",
            "unicode": "café",
            "path": "C:\\temp",
        }

    def test_unknown_suffix_is_properties(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "settings.conf").write_text("a=1\n", encoding="utf-8")
        assert loader.load_file("settings.conf") == {"a": "1"}

    def test_trailing_backslash_at_end_of_file_dropped(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.properties").write_text("a=1\nb=two\\", encoding="utf-8")
        assert loader.load_file("a.properties") == {"a": "1", "b": "two"}

    def test_lone_trailing_backslash_unescaped_away(self):
        assert ConfigLoader._unescape("two\\") == "two"
        assert ConfigLoader._unescape("two\\\\") == "two\\"

    def test_invalid_utf8(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.properties").write_bytes(b"name=caf\xe9\n")
        with pytest.raises(PropertiesFormatError, match="UTF-8") as exc_info:
            loader.load_file("a.properties")
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


class TestXmlFormat:
    """Tests for Java XML properties files."""

    def test_entries(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.xml").write_text(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">\n'
            "<properties>\n"
            "  <comment>Settings</comment>\n"
            '  <entry key="db.host">localhost</entry>\n'
            '  <entry key="empty"></entry>\n'
            "</properties>\n",
            encoding="utf-8",
        )
        assert loader.load_file("a.xml") == {"db.host": "localhost", "empty": ""}

    def test_malformed_xml(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.xml").write_text("<properties><entry key='a'>", encoding="utf-8")
        with pytest.raises(PropertiesFormatError) as exc_info:
            loader.load_file("a.xml")
        assert exc_info.value.path == tmp_path / "a.xml"

    def test_wrong_root(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.xml").write_text("<settings/>", encoding="utf-8")
        with pytest.raises(PropertiesFormatError, match="<properties>"):
            loader.load_file("a.xml")

    def test_entry_without_key(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.xml").write_text("<properties><entry>x</entry></properties>", encoding="utf-8")
        with pytest.raises(PropertiesFormatError, match="key"):
            loader.load_file("a.xml")


class TestYamlFormat:
    """Tests for YAML files."""

    def test_nested_mappings_flattened(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.yaml").write_text(
            "db:\n"
            "  host: localhost\n"
            "  port: 5432\n"
            "feature:\n"
            "  enabled: true\n"
            "hosts: [a, b]\n"
            "nothing: null\n",
            encoding="utf-8",
        )
        assert loader.load_file("a.yaml") == {
            "db.host": "localhost",
            "db.port": "5432",
            "feature.enabled": "true",
            "hosts": "a,b",
            "nothing": "",
        }

    def test_env_substitution(self, loader: ConfigLoader, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("OMNISETTINGS_TEST_HOST", "db.internal")
        monkeypatch.delenv("OMNISETTINGS_TEST_MISSING", raising=False)
        (tmp_path / "a.yml").write_text(
            "host: ${OMNISETTINGS_TEST_HOST}\n"
            "port: ${OMNISETTINGS_TEST_MISSING:5432}\n",
            encoding="utf-8",
        )
        assert loader.load_file("a.yml") == {"host": "db.internal", "port": "5432"}

    def test_empty_yaml(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.yaml").write_text("", encoding="utf-8")
        assert loader.load_file("a.yaml") == {}

    def test_top_level_list_rejected(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.yaml").write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(PropertiesFormatError, match="mapping"):
            loader.load_file("a.yaml")

    def test_invalid_yaml(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "a.yaml").write_text("a: [unclosed\n", encoding="utf-8")
        with pytest.raises(PropertiesFormatError):
            loader.load_file("a.yaml")


class TestLookup:
    """Tests for missing files, staged bundles and resource discovery."""

    def test_missing_file(self, loader: ConfigLoader):
        with pytest.raises(FileNotFoundError):
            loader.load_file("missing.properties")
        assert loader.load_optional("missing.properties") == {}

    def test_absolute_path_ignores_base(self, tmp_path: Path):
        path = tmp_path / "abs.properties"
        path.write_text("a=1\n", encoding="utf-8")
        assert ConfigLoader(tmp_path / "elsewhere").load_file(path) == {"a": "1"}

    def test_load_staged_overlays_stage(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "app.properties").write_text("a=base\nb=base\n", encoding="utf-8")
        (tmp_path / "prod").mkdir()
        (tmp_path / "prod" / "app.properties").write_text("b=prod\n", encoding="utf-8")

        assert loader.load_staged("app.properties", "prod") == {"a": "base", "b": "prod"}
        assert loader.load_staged("app.properties", "dev") == {"a": "base", "b": "base"}
        assert loader.load_staged("app.properties", None) == {"a": "base", "b": "base"}

    def test_staged_paths(self, loader: ConfigLoader, tmp_path: Path):
        assert loader.staged_paths("app.xml", "test") == [
            tmp_path / "app.xml",
            tmp_path / "test" / "app.xml",
        ]
        assert loader.staged_paths("app.xml", None) == [tmp_path / "app.xml"]

    def test_find_resources_in_suffix_order(self, loader: ConfigLoader, tmp_path: Path):
        (tmp_path / "omni-settings.yaml").write_text("a: 1\n", encoding="utf-8")
        (tmp_path / "omni-settings.properties").write_text("a=1\n", encoding="utf-8")

        assert loader.find_resources("omni-settings") == [
            tmp_path / "omni-settings.properties",
            tmp_path / "omni-settings.yaml",
        ]
        assert loader.find_resources("absent") == []
