"""Tests for spectry.parser.document."""

from __future__ import annotations

import pytest

from spectry.exceptions import DocumentError, OperationNotFoundError, UnknownReferenceError
from spectry.models import HTTPMethod
from spectry.parser import parse
from spectry.parser.document import DEFAULT_SERVER_URL, SpecDocument, freeze, thaw


class TestFreezeThaw:
    def test_thaw_reverses_freeze(self) -> None:
        value = {"a": [1, {"b": 2}], "c": "x"}
        assert thaw(freeze(value)) == value

    def test_freeze_stringifies_keys(self) -> None:
        frozen = freeze({200: {"description": "ok"}})
        assert list(frozen) == ["200"]

    def test_to_dict_is_an_independent_copy(self, petstore_doc: SpecDocument) -> None:
        data = petstore_doc.to_dict()
        data["info"]["title"] = "changed"
        assert petstore_doc.title == "Swagger Petstore"


class TestServers:
    def test_declared_servers_in_order(self, petstore_doc: SpecDocument) -> None:
        servers = petstore_doc.servers()
        assert [s.url for s in servers] == [
            "https://petstore3.swagger.io/api/v3",
            "http://localhost:8080/api/v3",
        ]
        assert servers[0].description == "Public sandbox"

    def test_swagger_servers_from_host(self, swagger_doc: SpecDocument) -> None:
        assert [s.url for s in swagger_doc.servers()] == [
            "https://petstore.swagger.io/v2",
            "http://petstore.swagger.io/v2",
        ]

    def test_placeholder_when_none_declared(self) -> None:
        doc = parse('{"openapi": "3.0.0", "info": {"title": "T", "version": "1"}, "paths": {}}')
        assert [s.url for s in doc.servers()] == [DEFAULT_SERVER_URL]


class TestOperations:
    def test_lookup(self, petstore_doc: SpecDocument) -> None:
        op = petstore_doc.operation("/pet/{petId}", "get")
        assert op.operation_id == "getPetById"
        assert op.method == HTTPMethod.GET

    def test_lookup_is_case_insensitive_on_method(self, petstore_doc: SpecDocument) -> None:
        assert petstore_doc.operation("/pet", "POST").operation_id == "addPet"

    def test_lookup_accepts_enum(self, petstore_doc: SpecDocument) -> None:
        assert petstore_doc.operation("/pet", HTTPMethod.PUT).operation_id == "updatePet"

    def test_unknown_path(self, petstore_doc: SpecDocument) -> None:
        with pytest.raises(OperationNotFoundError) as exc_info:
            petstore_doc.operation("/nope", "get")
        assert isinstance(exc_info.value, DocumentError)

    def test_unknown_method(self, petstore_doc: SpecDocument) -> None:
        with pytest.raises(OperationNotFoundError):
            petstore_doc.operation("/pet", "get")

    def test_methods_in_declaration_order(self, petstore_doc: SpecDocument) -> None:
        assert petstore_doc.methods("/pet") == [HTTPMethod.PUT, HTTPMethod.POST]

    def test_operations_are_cached(self, petstore_doc: SpecDocument) -> None:
        assert petstore_doc.operations() is petstore_doc.operations()


class TestSchemas:
    def test_schema_lookup(self, petstore_doc: SpecDocument) -> None:
        assert petstore_doc.schema("Category")["type"] == "object"

    def test_schemas_in_declaration_order(self, petstore_doc: SpecDocument) -> None:
        assert list(petstore_doc.schemas()) == ["Category", "Tag", "Pet", "User"]

    def test_unknown_schema(self, petstore_doc: SpecDocument) -> None:
        with pytest.raises(UnknownReferenceError):
            petstore_doc.schema("Missing")

    def test_non_mapping_schema(self) -> None:
        doc = parse('{"openapi": "3.0.0", "components": {"schemas": {"Bad": [1]}}}')
        with pytest.raises(DocumentError):
            doc.schema("Bad")

    def test_no_components(self, swagger_doc: SpecDocument) -> None:
        assert dict(swagger_doc.schemas()) == {}
