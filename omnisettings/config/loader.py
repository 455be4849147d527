"""
Configuration Loader

Reads flat key/value properties files (.properties, Java XML properties,
YAML) into plain ``dict[str, str]`` mappings.
"""

import os
import re
import xml.etree.ElementTree as ElementTree
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml


PathLike = Union[str, os.PathLike]

BOOTSTRAP_SUFFIXES = (".properties", ".xml", ".yaml", ".yml")


class PropertiesFormatError(ValueError):
    """Raised when a properties file exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse {path}: {reason}")


class ConfigLoader:
    """
    Loads flat settings files relative to a resource root.

    Features:
    - Format chosen by suffix: .properties, .xml, .yaml/.yml
    - Environment variable substitution in YAML: ${VAR_NAME}
    - Default values in YAML: ${VAR_NAME:default}
    - Nested YAML mappings flattened to dotted keys
    - Staged bundles: <root>/<file> overlaid by <root>/<stage>/<file>

    Example:
        ```python
        loader = ConfigLoader("config")
        settings = loader.load_staged("application-settings.xml", "prod")
        ```
    """

    # Pattern for environment variable substitution
    ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')

    _ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}

    def __init__(self, base_path: Optional[PathLike] = None):
        """
        Initialize the config loader.

        Args:
            base_path: Resource root for relative paths
        """
        self.base_path = Path(base_path) if base_path else Path.cwd()

    def load_file(self, path: PathLike) -> dict[str, str]:
        """
        Load a properties file.

        Args:
            path: Path to the file, relative to base_path unless absolute

        Returns:
            Flat mapping of keys to string values

        Raises:
            FileNotFoundError: If the file does not exist
            PropertiesFormatError: If the content is not UTF-8 or cannot be parsed
            OSError: If the file cannot be read
        """
        file_path = self._resolve_path(path)

        if not file_path.is_file():
            raise FileNotFoundError(f"Settings file not found: {file_path}")

        try:
            content = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise PropertiesFormatError(file_path, f"not valid UTF-8: {e.reason}") from e
        suffix = file_path.suffix.lower()

        if suffix == ".xml":
            return self._parse_xml(content, file_path)
        if suffix in (".yaml", ".yml"):
            return self._parse_yaml(content, file_path)
        return self._parse_properties(content)

    def load_optional(self, path: PathLike) -> dict[str, str]:
        """Load a properties file, or return an empty mapping if it is missing."""
        if not self._resolve_path(path).is_file():
            return {}
        return self.load_file(path)

    def staged_paths(self, file_name: str, stage: Optional[str]) -> list[Path]:
        """Paths of the base bundle and, when a stage is set, the stage bundle."""
        paths = [self._resolve_path(file_name)]
        if stage:
            paths.append(self._resolve_path(Path(stage) / file_name))
        return paths

    def load_staged(self, file_name: str, stage: Optional[str]) -> dict[str, str]:
        """
        Load a bundle and its stage-specific overlay.

        Later files override earlier ones. Missing files are skipped.
        """
        merged: dict[str, str] = {}
        for path in self.staged_paths(file_name, stage):
            merged.update(self.load_optional(path))
        return merged

    def find_resources(
        self,
        base_name: str,
        suffixes: Iterable[str] = BOOTSTRAP_SUFFIXES,
    ) -> list[Path]:
        """Existing files named ``base_name`` plus one of ``suffixes``, in suffix order."""
        candidates = (self._resolve_path(f"{base_name}{suffix}") for suffix in suffixes)
        return [p for p in candidates if p.is_file()]

    def _resolve_path(self, path: PathLike) -> Path:
        """Resolve a path relative to base_path."""
        p = Path(path)
        if p.is_absolute():
            return p
        return self.base_path / p

    # ------------------------------------------------------------------
    # YAML
    # ------------------------------------------------------------------

    def _substitute_env_vars(self, content: str) -> str:
        """
        Substitute environment variables in content.

        Supports:
        - ${VAR_NAME} - required variable
        - ${VAR_NAME:default} - variable with default
        """
        def replace(match):
            var_name = match.group(1)
            default = match.group(2)

            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default is not None:
                return default
            else:
                # Return empty string for missing variables
                return ""

        return self.ENV_PATTERN.sub(replace, content)

    def _parse_yaml(self, content: str, file_path: Path) -> dict[str, str]:
        content = self._substitute_env_vars(content)
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise PropertiesFormatError(file_path, str(e)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PropertiesFormatError(
                file_path, f"top-level YAML must be a mapping, got {type(data).__name__}"
            )

        flat: dict[str, str] = {}
        self._flatten(data, "", flat)
        return flat

    def _flatten(self, data: dict[Any, Any], prefix: str, out: dict[str, str]) -> None:
        for key, value in data.items():
            dotted = f"{prefix}{key}"
            if isinstance(value, dict):
                self._flatten(value, f"{dotted}.", out)
            else:
                out[dotted] = self._to_text(value)

    @staticmethod
    def _to_text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (list, tuple)):
            return ",".join(ConfigLoader._to_text(v) for v in value)
        return str(value)

    # ------------------------------------------------------------------
    # XML properties
    # ------------------------------------------------------------------

    def _parse_xml(self, content: str, file_path: Path) -> dict[str, str]:
        try:
            root = ElementTree.fromstring(content)
        except ElementTree.ParseError as e:
            raise PropertiesFormatError(file_path, str(e)) from e

        if root.tag != "properties":
            raise PropertiesFormatError(
                file_path, f"root element must be <properties>, got <{root.tag}>"
            )

        result: dict[str, str] = {}
        for entry in root.iter("entry"):
            key = entry.get("key")
            if key is None:
                raise PropertiesFormatError(file_path, "<entry> without key attribute")
            result[key] = entry.text or ""
        return result

    # ------------------------------------------------------------------
    # Plain .properties
    # ------------------------------------------------------------------

    def _parse_properties(self, content: str) -> dict[str, str]:
        result: dict[str, str] = {}
        for line in self._logical_lines(content.splitlines()):
            key, value = self._split_entry(line)
            result[self._unescape(key)] = self._unescape(value)
        return result

    @staticmethod
    def _logical_lines(lines: list[str]) -> Iterable[str]:
        """Join backslash-continued lines and drop blanks and comments."""
        buffer: Optional[str] = None
        for raw in lines:
            line = raw.lstrip()
            if buffer is None:
                if not line or line[0] in "#!":
                    continue
                buffer = ""
            trailing = len(line) - len(line.rstrip("\\"))
            if trailing % 2 == 1:
                buffer += line[:-1]
                continue
            yield buffer + line
            buffer = None
        if buffer:
            yield buffer

    @staticmethod
    def _split_entry(line: str) -> tuple[str, str]:
        index = 0
        length = len(line)
        while index < length:
            char = line[index]
            if char == "\\":
                index += 2
                continue
            if char in "=: \t\f":
                break
            index += 1

        key = line[:index]
        rest = line[index:].lstrip(" \t\f")
        if rest[:1] in ("=", ":"):
            rest = rest[1:].lstrip(" \t\f")
        return key, rest

    @classmethod
    def _unescape(cls, text: str) -> str:
        if "\\" not in text:
            return text

        out = []
        index = 0
        while index < len(text):
            char = text[index]
            if char != "\\":
                out.append(char)
                index += 1
                continue
            if index + 1 == len(text):
                # Lone trailing backslash
                break
            nxt = text[index + 1]
            if nxt == "u" and re.fullmatch(r"[0-9a-fA-F]{4}", text[index + 2:index + 6]):
                out.append(chr(int(text[index + 2:index + 6], 16)))
                index += 6
                continue
            out.append(cls._ESCAPES.get(nxt, nxt))
            index += 2
        return "".join(out)
