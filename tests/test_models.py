import pydantic
import pytest

from api_playground.parser.base import EndpointDescriptor, Parameter, ResponseEnvelope


class TestParameter:
    def test_create_minimal_param(self):
        p = Parameter(name="id", location="path", required=True)
        assert p.type == "string"
        assert p.description is None
        assert p.default is None
        assert p.enum is None

    def test_create_param_with_enum_and_default(self):
        p = Parameter(name="sort", location="query", type="string", enum=["asc", "desc"], default="asc")
        assert p.enum == ["asc", "desc"]
        assert p.default == "asc"

    def test_rejects_unknown_location(self):
        with pytest.raises(pydantic.ValidationError):
            Parameter(name="sid", location="cookie")


class TestEndpointDescriptor:
    def test_method_is_uppercased(self):
        ep = EndpointDescriptor(api_endpoint="/users", api_method="patch")
        assert ep.api_method == "PATCH"

    def test_rejects_unknown_method(self):
        with pytest.raises(pydantic.ValidationError):
            EndpointDescriptor(api_endpoint="/users", api_method="TRACE")

    def test_rejects_duplicate_name_in_same_location(self):
        with pytest.raises(pydantic.ValidationError, match="duplicate query parameter 'q'"):
            EndpointDescriptor(
                api_parameters=[
                    Parameter(name="q", location="query"),
                    Parameter(name="q", location="query"),
                ]
            )

    def test_same_name_in_different_locations_is_allowed(self):
        ep = EndpointDescriptor(
            api_parameters=[
                Parameter(name="id", location="path", required=True),
                Parameter(name="id", location="body"),
            ]
        )
        assert len(ep.parameters) == 2

    def test_parameters_default_to_empty(self):
        assert EndpointDescriptor().parameters == []

    def test_serialization_roundtrip(self):
        ep = EndpointDescriptor(
            api_endpoint="/users/{id}",
            api_method="DELETE",
            api_parameters=[Parameter(name="id", location="path", required=True, type="integer")],
            api_response_example={"deleted": True},
        )
        ep2 = EndpointDescriptor(**ep.model_dump())
        assert ep2 == ep


class TestResponseEnvelope:
    def test_failure_shape(self):
        env = ResponseEnvelope.failure("connection refused")
        assert env.status == 0
        assert env.status_text == "Error"
        assert env.headers == {}
        assert env.data is None
        assert env.error == "connection refused"

    def test_status_zero_requires_error(self):
        with pytest.raises(pydantic.ValidationError):
            ResponseEnvelope(status=0, status_text="Error")

    def test_error_only_with_status_zero(self):
        with pytest.raises(pydantic.ValidationError):
            ResponseEnvelope(status=500, status_text="Internal Server Error", error="boom")

    def test_ok_range(self):
        assert ResponseEnvelope(status=204, status_text="No Content").ok
        assert not ResponseEnvelope(status=404, status_text="Not Found").ok

    def test_to_wire_uses_camel_case(self):
        env = ResponseEnvelope(status=200, status_text="OK", headers={"a": "b"}, data=None)
        assert env.to_wire() == {"status": 200, "statusText": "OK", "headers": {"a": "b"}, "data": None}

    def test_to_wire_keeps_error(self):
        assert ResponseEnvelope.failure("x").to_wire()["error"] == "x"
