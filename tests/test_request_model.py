import pytest

from api_playground.errors import ValidationError
from api_playground.parser.base import EndpointDescriptor, Parameter
from api_playground.request import RequestModel, encode_component, has_value, render_value


def _model(**kwargs) -> RequestModel:
    defaults = {"base_url": "https://x.com", "endpoint": "/items", "method": "GET"}
    defaults.update(kwargs)
    return RequestModel(**defaults)


class TestBuildUrl:
    def test_path_and_query_substitution(self):
        model = _model(
            base_url="https://x.com/",
            endpoint="/items/{id}",
            parameters=(
                Parameter(name="id", location="path", required=True),
                Parameter(name="q", location="query"),
            ),
            parameter_values={"id": 42, "q": "a b"},
        )
        assert model.build_url() == "https://x.com/items/42?q=a%20b"

    def test_unset_path_param_becomes_empty(self):
        model = _model(endpoint="/items/{id}", parameters=(Parameter(name="id", location="path", required=True),))
        assert model.build_url() == "https://x.com/items/"

    def test_every_placeholder_is_replaced(self):
        model = _model(
            endpoint="/a/{id}/b/{id}",
            parameters=(Parameter(name="id", location="path"),),
            parameter_values={"id": "7"},
        )
        assert model.build_url() == "https://x.com/a/7/b/7"

    def test_empty_query_values_are_skipped(self):
        model = _model(
            parameters=(
                Parameter(name="a", location="query"),
                Parameter(name="b", location="query"),
                Parameter(name="c", location="query"),
                Parameter(name="d", location="query"),
            ),
            parameter_values={"a": "", "b": 0, "c": False},
        )
        assert model.build_url() == "https://x.com/items?b=0&c=false"

    def test_query_order_follows_declaration(self):
        model = _model(
            parameters=(Parameter(name="z", location="query"), Parameter(name="a", location="query")),
            parameter_values={"a": "1", "z": "2"},
        )
        assert model.build_url() == "https://x.com/items?z=2&a=1"

    def test_reserved_characters_are_encoded(self):
        model = _model(
            endpoint="/files/{path}",
            parameters=(Parameter(name="path", location="path"),),
            parameter_values={"path": "a/b&c"},
        )
        assert model.build_url() == "https://x.com/files/a%2Fb%26c"

    def test_only_one_trailing_slash_is_stripped(self):
        assert _model(base_url="https://x.com/api/").build_url() == "https://x.com/api/items"


class TestBuildBody:
    def test_no_body_for_get(self):
        model = _model(request_body_text='{"a": 1}')
        assert model.build_body() is None

    def test_valid_body_text_used_verbatim(self):
        model = _model(method="POST", request_body_text='{ "a": 1 }')
        assert model.build_body(strict=True) == '{ "a": 1 }'

    def test_invalid_body_text_strict(self):
        model = _model(method="POST", request_body_text="{oops")
        with pytest.raises(ValidationError, match="Invalid JSON"):
            model.build_body(strict=True)

    def test_invalid_body_text_lenient_falls_back_to_params(self):
        model = _model(
            method="PUT",
            request_body_text="{oops",
            parameters=(Parameter(name="name", location="body"),),
            parameter_values={"name": "Ann"},
        )
        assert model.build_body() == '{"name":"Ann"}'

    def test_body_from_params_in_declared_order(self):
        model = _model(
            method="PATCH",
            parameters=(
                Parameter(name="b", location="body", type="integer"),
                Parameter(name="a", location="body", type="integer"),
                Parameter(name="skip", location="body"),
            ),
            parameter_values={"a": 1, "b": 2, "skip": ""},
        )
        assert model.build_body() == '{"b":2,"a":1}'

    def test_no_body_values_means_no_body(self):
        model = _model(method="POST", parameters=(Parameter(name="a", location="body"),), parameter_values={"a": ""})
        assert model.build_body() is None


class TestBuildHeaders:
    def test_preview_and_execute_base_headers(self):
        model = _model()
        assert model.build_headers("preview") == {"Accept": "application/json"}
        assert model.build_headers("execute") == {"Content-Type": "application/json"}

    def test_token_and_header_params(self):
        model = _model(
            auth_token="tok",
            parameters=(
                Parameter(name="X-Version", location="header", type="integer"),
                Parameter(name="X-Empty", location="header"),
            ),
            parameter_values={"X-Version": 5, "X-Empty": ""},
        )
        assert model.build_headers("execute") == {
            "Content-Type": "application/json",
            "Authorization": "Bearer tok",
            "X-Version": "5",
        }


class TestToTarget:
    def test_incomplete_model_rejected(self):
        with pytest.raises(ValidationError, match="Base URL, endpoint, and method are required"):
            _model(base_url="").to_target()

    def test_target_from_descriptor(self):
        descriptor = EndpointDescriptor(
            api_endpoint="/users",
            api_method="POST",
            api_parameters=[Parameter(name="name", location="body")],
        )
        model = RequestModel.from_descriptor(
            descriptor, base_url="https://api.example.com", parameter_values={"name": "Ann"}
        )
        target = model.to_target()
        assert target.url == "https://api.example.com/users"
        assert target.method == "POST"
        assert target.headers == {"Content-Type": "application/json"}
        assert target.body == '{"name":"Ann"}'


class TestValueRendering:
    def test_render_value(self):
        assert render_value(None) == ""
        assert render_value("x") == "x"
        assert render_value(True) == "true"
        assert render_value(1.5) == "1.5"
        assert render_value([1, "a"]) == '[1,"a"]'

    def test_has_value(self):
        assert not has_value(None)
        assert not has_value("")
        assert has_value(0)
        assert has_value(False)

    def test_encode_component_matches_uri_component_rules(self):
        assert encode_component("a b!*'()~") == "a%20b!*'()~"
