"""Tests for spectry.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path

import httpx
import pytest

from spectry.exceptions import (
    ConflictingVersionFieldsError,
    MissingVersionFieldError,
    NotAnObjectError,
    SpecLoadError,
    SpecParseError,
    SpecSyntaxError,
)
from spectry.models import Severity
from spectry.parser.loader import (
    EXPORT_FILENAME,
    export_spec,
    format_spec_text,
    load_text,
    parse,
    validate_text,
)

MINIMAL_JSON = json.dumps(
    {"openapi": "3.0.0", "info": {"title": "T", "version": "1"}, "paths": {}}
)


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------


class TestParse:
    def test_parses_json_text(self) -> None:
        doc = parse(MINIMAL_JSON)
        assert doc.version_field == "openapi"
        assert doc.version == "3.0.0"
        assert doc.title == "T"

    def test_parses_yaml_text(self, petstore_text: str) -> None:
        doc = parse(petstore_text)
        assert doc.title == "Swagger Petstore"
        assert doc.version == "3.0.2"
        assert not doc.is_swagger

    def test_parses_swagger_marker(self, swagger_text: str) -> None:
        doc = parse(swagger_text)
        assert doc.version_field == "swagger"
        assert doc.version == "2.0"
        assert doc.is_swagger

    def test_keeps_raw_text(self, petstore_text: str) -> None:
        assert parse(petstore_text).raw_text == petstore_text

    def test_numeric_version_marker_exposed_as_text(self) -> None:
        doc = parse("openapi: 3.0\ninfo:\n  title: T\n  version: '1'\npaths: {}\n")
        assert doc.raw["openapi"] == 3.0
        assert doc.version == "3.0"

    def test_complete_document_has_no_warnings(self, petstore_doc) -> None:
        assert petstore_doc.warnings == ()

    def test_missing_title_is_a_warning(self) -> None:
        doc = parse('{"openapi": "3.0.0", "info": {"version": "1"}, "paths": {}}')
        messages = [w.message for w in doc.warnings]
        assert messages == ["Missing required field: info.title"]

    def test_missing_info_reports_each_field(self) -> None:
        doc = parse('{"openapi": "3.0.0", "paths": {"/a": {}}}')
        messages = [w.message for w in doc.warnings]
        assert messages == [
            "Missing required field: info",
            "Missing required field: info.title",
            "Missing required field: info.version",
        ]

    def test_no_paths_or_components_is_a_warning(self) -> None:
        doc = parse('{"openapi": "3.0.0", "info": {"title": "T", "version": "1"}}')
        assert [w.message for w in doc.warnings] == ["API should have either paths or components"]
        assert all(w.severity == Severity.WARNING for w in doc.warnings)

    @pytest.mark.parametrize("section", ["paths", "components"])
    def test_empty_section_counts_as_present(self, section: str) -> None:
        doc = parse(
            '{"openapi": "3.0.0", "info": {"title": "T", "version": "1"}, "%s": {}}' % section
        )
        assert doc.warnings == ()

    def test_null_paths_is_a_warning(self) -> None:
        doc = parse("openapi: 3.0.0\ninfo: {title: T, version: '1'}\npaths:\n")
        assert [w.message for w in doc.warnings] == ["API should have either paths or components"]

    def test_components_only_is_fine(self) -> None:
        doc = parse(
            '{"openapi": "3.1.0", "info": {"title": "T", "version": "1"},'
            ' "components": {"schemas": {"A": {"type": "string"}}}}'
        )
        assert doc.warnings == ()

    def test_missing_version_marker(self) -> None:
        with pytest.raises(MissingVersionFieldError, match="openapi or swagger"):
            parse('{"info": {"title": "T", "version": "1"}, "paths": {}}')

    def test_both_version_markers_conflict(self) -> None:
        with pytest.raises(ConflictingVersionFieldsError):
            parse('{"openapi": "3.0.0", "swagger": "2.0", "paths": {}}')

    def test_array_root_is_not_an_object(self) -> None:
        with pytest.raises(NotAnObjectError):
            parse("[1, 2, 3]")

    def test_scalar_root_is_not_an_object(self) -> None:
        with pytest.raises(NotAnObjectError):
            parse("just some words")

    def test_empty_text_is_not_an_object(self) -> None:
        with pytest.raises(NotAnObjectError, match="empty document"):
            parse("")

    def test_syntax_error(self) -> None:
        with pytest.raises(SpecSyntaxError) as exc_info:
            parse('{"openapi": "3.0.0"')
        assert "Invalid YAML or JSON format" in str(exc_info.value)
        assert isinstance(exc_info.value, SpecParseError)

    def test_syntax_error_reports_yaml_line(self) -> None:
        with pytest.raises(SpecSyntaxError) as exc_info:
            parse("foo: bar\n  baz: qux\n")
        assert exc_info.value.line == 2

    def test_document_is_read_only(self, petstore_doc) -> None:
        with pytest.raises(TypeError):
            petstore_doc.raw["openapi"] = "9.9.9"  # type: ignore[index]


# ---------------------------------------------------------------------------
# validate_text
# ---------------------------------------------------------------------------


class TestValidateText:
    def test_empty_text_is_valid_without_document(self) -> None:
        result = validate_text("   \n")
        assert result.is_valid
        assert result.issues == []
        assert result.document is None

    def test_valid_document(self, petstore_text: str) -> None:
        result = validate_text(petstore_text)
        assert result.is_valid
        assert result.document is not None
        assert result.errors == []

    def test_warnings_do_not_invalidate(self) -> None:
        result = validate_text('{"openapi": "3.0.0", "info": {"title": "T"}, "paths": {}}')
        assert result.is_valid
        assert [w.message for w in result.warnings] == ["Missing required field: info.version"]

    def test_syntax_error_becomes_issue_with_line(self) -> None:
        result = validate_text("foo: bar\n  baz: qux\n")
        assert not result.is_valid
        assert result.document is None
        assert len(result.errors) == 1
        assert result.errors[0].line == 2

    def test_missing_marker_becomes_issue(self) -> None:
        result = validate_text('{"info": {}}')
        assert not result.is_valid
        issue = result.issues[0]
        assert issue.severity == Severity.ERROR
        assert issue.message == "Missing required field: openapi or swagger"
        assert issue.line == 1

    def test_never_raises_for_non_object(self) -> None:
        result = validate_text("- a\n- b\n")
        assert not result.is_valid


# ---------------------------------------------------------------------------
# format_spec_text
# ---------------------------------------------------------------------------


class TestFormatSpecText:
    def test_json_becomes_yaml_preserving_key_order(self) -> None:
        text = format_spec_text(MINIMAL_JSON)
        assert text.index("openapi:") < text.index("info:") < text.index("paths:")
        assert "info:\n  title: T\n" in text

    def test_output_round_trips_through_parse(self, petstore_text: str) -> None:
        formatted = format_spec_text(petstore_text)
        assert parse(formatted).to_dict() == parse(petstore_text).to_dict()

    def test_keeps_unicode(self) -> None:
        text = format_spec_text('{"openapi": "3.0.0", "info": {"title": "Café", "version": "1"}}')
        assert "Café" in text

    def test_rejects_unparsable_text(self) -> None:
        with pytest.raises(SpecSyntaxError):
            format_spec_text('{"openapi": ')


# ---------------------------------------------------------------------------
# export_spec
# ---------------------------------------------------------------------------


class TestExportSpec:
    def test_writes_openapi_yaml(self, tmp_path: Path, petstore_text: str) -> None:
        target = export_spec(petstore_text, tmp_path)
        assert target == tmp_path / EXPORT_FILENAME
        assert target.read_text(encoding="utf-8") == petstore_text

    def test_text_is_written_verbatim(self, tmp_path: Path) -> None:
        raw = 'openapi: "3.0.0"\r\ninfo:\r\n  title: Ünïcode\r\n'
        target = export_spec(raw, tmp_path)
        assert target.read_bytes() == raw.encode("utf-8")

    def test_creates_missing_directory(self, tmp_path: Path) -> None:
        target = export_spec(MINIMAL_JSON, tmp_path / "nested" / "dir")
        assert target.is_file()

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        (tmp_path / EXPORT_FILENAME).write_text("old", encoding="utf-8")
        export_spec("new", tmp_path)
        assert (tmp_path / EXPORT_FILENAME).read_text(encoding="utf-8") == "new"


# ---------------------------------------------------------------------------
# load_text
# ---------------------------------------------------------------------------


def _fake_get(response: httpx.Response):
    def _get(url: str, **kwargs):
        return response

    return _get


class TestLoadText:
    def test_loads_file(self, petstore_path: Path, petstore_text: str) -> None:
        assert load_text(str(petstore_path)) == petstore_text

    def test_file_keeps_crlf(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.yaml"
        path.write_bytes(b"openapi: 3.0.0\r\ninfo: {}\r\n")
        assert load_text(str(path)) == "openapi: 3.0.0\r\ninfo: {}\r\n"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecLoadError, match="not found"):
            load_text(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("  \n", encoding="utf-8")
        with pytest.raises(SpecLoadError, match="empty"):
            load_text(str(path))

    def test_loads_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(MINIMAL_JSON))
        assert load_text("-") == MINIMAL_JSON

    def test_empty_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        with pytest.raises(SpecLoadError, match="stdin"):
            load_text("-")

    def test_loads_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        url = "https://example.com/openapi.json"
        response = httpx.Response(200, text=MINIMAL_JSON, request=httpx.Request("GET", url))
        monkeypatch.setattr("spectry.parser.loader.httpx.get", _fake_get(response))
        assert load_text(url) == MINIMAL_JSON

    def test_url_http_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        url = "https://example.com/missing.json"
        response = httpx.Response(404, request=httpx.Request("GET", url))
        monkeypatch.setattr("spectry.parser.loader.httpx.get", _fake_get(response))
        with pytest.raises(SpecLoadError, match="HTTP 404: Not Found"):
            load_text(url)

    def test_url_connection_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _boom(url: str, **kwargs):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr("spectry.parser.loader.httpx.get", _boom)
        with pytest.raises(SpecLoadError, match="connection refused"):
            load_text("https://example.com/openapi.json")

    def test_yaml_file_round_trip(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            openapi: "3.1.0"
            info:
              title: YAML Test
              version: "2.0.0"
            paths: {}
        """)
        path = tmp_path / "spec.yml"
        path.write_text(content, encoding="utf-8")
        assert parse(load_text(str(path))).title == "YAML Test"
