import json
from pathlib import Path

import pytest

from api_dashboard.catalog.detect import detect_format
from api_dashboard.catalog.loader import BUNDLED_CATALOG, load_catalog, parse_catalog
from api_dashboard.catalog.openapi import parse_openapi
from api_dashboard.errors import CatalogError

FIXTURES = Path(__file__).parent / "fixtures"


class TestDetectFormat:
    def test_detect_bundled_catalog(self):
        assert detect_format(BUNDLED_CATALOG) == "catalog"

    def test_detect_openapi_yaml(self):
        assert detect_format(FIXTURES / "petstore.yaml") == "openapi"

    def test_detect_swagger_json(self):
        assert detect_format(FIXTURES / "swagger2.json") == "openapi"

    def test_detect_unknown_format(self, tmp_path):
        f = tmp_path / "doc.md"
        f.write_text("# API Docs\nSome text")
        assert detect_format(f) == "unknown"


class TestNativeCatalog:
    def test_yaml_bodies_stored_as_json_text(self):
        endpoints = parse_catalog(FIXTURES / "catalog.yaml")
        signin = endpoints[0]
        assert json.loads(signin.request_body) == {"email": "user@example.com", "password": "password123"}
        assert signin.request_body.startswith("{\n  ")

    def test_string_bodies_kept_verbatim(self):
        signup = parse_catalog(FIXTURES / "catalog.yaml")[1]
        assert signup.request_body == '{"email": "user@example.com"}'
        assert signup.method == "POST"

    def test_load_custom_catalog(self):
        catalog = load_catalog(FIXTURES / "catalog.yaml")
        assert catalog.categories() == ["Auth", "Keys"]
        assert catalog.find("/api/api-keys/{key_id}", "DELETE").path_params == ("key_id",)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "nope.yaml")

    def test_unknown_format(self, tmp_path):
        f = tmp_path / "doc.md"
        f.write_text("# API Docs")
        with pytest.raises(CatalogError, match="Unrecognised"):
            load_catalog(f)

    def test_invalid_endpoint(self, tmp_path):
        f = tmp_path / "bad.yaml"
        f.write_text("endpoints:\n  - path: /api/x\n    method: GET\n")
        with pytest.raises(CatalogError, match="Invalid endpoint"):
            load_catalog(f)

    def test_duplicate_endpoint(self, tmp_path):
        f = tmp_path / "dup.yaml"
        f.write_text(
            "endpoints:\n"
            "  - {path: /api/x, method: GET, category: A}\n"
            "  - {path: /api/x, method: GET, category: B}\n"
        )
        with pytest.raises(CatalogError, match="Duplicate"):
            load_catalog(f)

    @pytest.mark.parametrize("entry", ["just-a-string", "null", "[GET, /api/x]"])
    def test_entry_that_is_not_a_mapping(self, tmp_path, entry):
        f = tmp_path / "bad.yaml"
        f.write_text(f"endpoints:\n  - {entry}\n")
        with pytest.raises(CatalogError, match="entry 0 is not a mapping"):
            load_catalog(f)

    def test_yaml_timestamp_in_inline_body(self, tmp_path):
        f = tmp_path / "catalog.yaml"
        f.write_text(
            "endpoints:\n"
            "  - path: /api/api-keys\n"
            "    method: GET\n"
            "    category: Keys\n"
            "    response_example:\n"
            "      created_at: 2024-01-01T00:00:00Z\n"
        )
        [endpoint] = load_catalog(f).all()
        assert json.loads(endpoint.response_example)["created_at"].startswith("2024-01-01")


class TestOpenApiImport:
    def test_petstore_endpoints(self):
        endpoints = parse_openapi(FIXTURES / "petstore.yaml")
        # PATCH is not supported by the explorer
        assert [e.label for e in endpoints] == [
            "GET /pets",
            "POST /pets",
            "GET /pets/{petId}",
            "GET /health",
        ]

    def test_query_param_with_type_and_description(self):
        get_pets = parse_openapi(FIXTURES / "petstore.yaml")[0]
        assert get_pets.category == "pets"
        assert get_pets.description == "List all pets"
        assert get_pets.query_params == ("limit",)
        assert get_pets.param_types == {"limit": "int32"}
        assert get_pets.param_descriptions == {"limit": "How many items to return"}
        assert json.loads(get_pets.response_example) == [{"id": 1, "name": "Fido"}]

    def test_request_body_built_from_referenced_schema(self):
        post_pets = parse_openapi(FIXTURES / "petstore.yaml")[1]
        assert json.loads(post_pets.request_body) == {"name": "Fido", "tag": "string"}
        assert post_pets.response_example is None

    def test_path_level_parameters(self):
        get_pet = parse_openapi(FIXTURES / "petstore.yaml")[2]
        assert get_pet.path_params == ("petId",)
        assert get_pet.param_descriptions["petId"] == "The id of the pet to retrieve"
        assert json.loads(get_pet.response_example) == {"id": 0, "name": "string"}

    def test_untagged_operation_gets_default_category(self):
        health = parse_openapi(FIXTURES / "petstore.yaml")[3]
        assert health.category == "General"
        assert health.response_example is None

    def test_swagger2_body_parameter(self):
        [put_user] = parse_openapi(FIXTURES / "swagger2.json")
        assert put_user.label == "PUT /users/{id}"
        assert put_user.path_params == ("id",)
        assert put_user.param_types == {"id": "integer"}
        assert json.loads(put_user.request_body) == {"email": "a@b.com", "active": False}
        assert json.loads(put_user.response_example) == {"id": 7, "email": "a@b.com"}

    def test_load_catalog_from_openapi(self):
        catalog = load_catalog(FIXTURES / "petstore.yaml")
        assert catalog.categories() == ["pets", "General"]

    def test_yaml_timestamp_in_example(self, tmp_path):
        f = tmp_path / "api.yaml"
        f.write_text(
            "openapi: 3.0.0\n"
            "paths:\n"
            "  /keys:\n"
            "    get:\n"
            "      responses:\n"
            "        '200':\n"
            "          content:\n"
            "            application/json:\n"
            "              example:\n"
            "                created_at: 2024-01-01T00:00:00Z\n"
        )
        [endpoint] = load_catalog(f).all()
        assert json.loads(endpoint.response_example)["created_at"].startswith("2024-01-01")

    def test_null_operation(self, tmp_path):
        f = tmp_path / "api.yaml"
        f.write_text("openapi: 3.0.0\npaths:\n  /keys:\n    get: null\n")
        with pytest.raises(CatalogError, match="GET /keys is not a mapping"):
            load_catalog(f)

    def test_null_path_item(self, tmp_path):
        f = tmp_path / "api.yaml"
        f.write_text("openapi: 3.0.0\npaths:\n  /keys:\n")
        with pytest.raises(CatalogError, match="/keys is not a mapping"):
            load_catalog(f)
