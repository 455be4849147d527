"""
Tests for omnisettings Exception Hierarchy

Tests the custom exception classes.
"""

from datetime import datetime

from omnisettings.core.exceptions import (
    # Base
    SettingsError,
    ErrorContext,
    # Resolution errors
    FatalConfigError,
    BootstrapError,
    BundleError,
    ExternalSettingsError,
    LoaderError,
    # Access errors
    SettingParseError,
)


class TestErrorContext:
    """Tests for ErrorContext dataclass."""

    def test_default_values(self):
        """Should have sensible defaults."""
        ctx = ErrorContext()
        assert ctx.source is None
        assert ctx.operation is None
        assert ctx.stage is None
        assert isinstance(ctx.timestamp, datetime)
        assert ctx.metadata == {}


class TestSettingsError:
    """Tests for base SettingsError class."""

    def test_basic_error(self):
        """Should create basic error."""
        err = SettingsError("Something went wrong")
        assert str(err) == "Something went wrong"
        assert err.message == "Something went wrong"
        assert err.cause is None

    def test_with_context(self):
        """Should include context in string."""
        ctx = ErrorContext(source="file.xml", operation="load", stage="dev")
        err = SettingsError("Error", context=ctx)
        assert "[source=file.xml]" in str(err)
        assert "[op=load]" in str(err)
        assert "[stage=dev]" in str(err)


class TestResolutionErrors:
    """Tests for fatal resolution exceptions."""

    def test_hierarchy(self):
        """Resolution errors should inherit from FatalConfigError."""
        assert issubclass(FatalConfigError, SettingsError)
        assert issubclass(BootstrapError, FatalConfigError)
        assert issubclass(BundleError, FatalConfigError)
        assert issubclass(ExternalSettingsError, FatalConfigError)
        assert issubclass(LoaderError, FatalConfigError)

    def test_all_fatal(self):
        """Every resolution error is a FatalConfigError."""
        for err in (
            BootstrapError("missing", resource="config/omni-settings"),
            BundleError("corrupt", resource="config/app.xml"),
            ExternalSettingsError("unreachable", path="/nope"),
            LoaderError("boom", loader_name="vault"),
        ):
            assert isinstance(err, FatalConfigError)
            assert err.context.operation is not None

    def test_attributes_and_default_context(self):
        """Should store the failing source and derive a context from it."""
        err = ExternalSettingsError("unreachable", path="/etc/app.properties")
        assert err.path == "/etc/app.properties"
        assert err.context.source == "/etc/app.properties"
        assert err.context.operation == "load_external"

        err = LoaderError("boom", loader_name="vault")
        assert err.loader_name == "vault"
        assert "[source=vault]" in str(err)


class TestSettingParseError:
    """Tests for access-time parse errors."""

    def test_attributes(self):
        """Should store key, value and kind."""
        err = SettingParseError("bad", key="port", value="abc", kind="integer")
        assert err.key == "port"
        assert err.value == "abc"
        assert err.kind == "integer"
        assert err.context.operation == "parse_integer"
        assert not isinstance(err, FatalConfigError)

