from api_playground.generator.curl import escape_single_quotes, generate_curl
from api_playground.parser.base import Parameter
from api_playground.parser.curl import parse_curl
from api_playground.request import RequestModel


def _update_user_model(**overrides) -> RequestModel:
    fields = dict(
        base_url="https://api.example.com",
        endpoint="/users/{id}",
        method="PUT",
        parameters=(
            Parameter(name="id", location="path", required=True, type="integer"),
            Parameter(name="verbose", location="query", type="boolean"),
            Parameter(name="X-Trace", location="header"),
            Parameter(name="name", location="body"),
        ),
        parameter_values={"id": 7, "verbose": True, "X-Trace": "abc", "name": "O'Neil"},
        auth_token="tok",
    )
    fields.update(overrides)
    return RequestModel(**fields)


class TestGenerateCurl:
    def test_full_command(self):
        expected = (
            'curl -X PUT "https://api.example.com/users/7?verbose=true" \\\n'
            '  -H "Accept: application/json" \\\n'
            '  -H "Authorization: Bearer tok" \\\n'
            '  -H "X-Trace: abc" \\\n'
            "  -d '{\"name\":\"O'\\''Neil\"}'"
        )
        assert generate_curl(_update_user_model()) == expected

    def test_empty_without_base_url(self):
        assert generate_curl(_update_user_model(base_url="")) == ""

    def test_empty_without_method(self):
        assert generate_curl(_update_user_model(method=None)) == ""

    def test_get_never_has_body(self):
        command = generate_curl(_update_user_model(method="GET", request_body_text='{"a": 1}'))
        assert "-d" not in command

    def test_edited_body_text_wins(self):
        command = generate_curl(_update_user_model(request_body_text='{"name": "Zed"}'))
        assert command.endswith("""-d '{"name": "Zed"}'""")

    def test_invalid_body_text_falls_back_to_params(self):
        command = generate_curl(_update_user_model(request_body_text="{not json"))
        assert "O'\\''Neil" in command

    def test_idempotent(self):
        model = _update_user_model()
        assert generate_curl(model) == generate_curl(model)

    def test_parse_roundtrip(self):
        model = _update_user_model()
        parsed = parse_curl(generate_curl(model))

        assert parsed.method == "PUT"
        assert parsed.base_url == "https://api.example.com"
        assert parsed.endpoint == "/users/7"
        assert {(p.name, p.value) for p in parsed.query_params} == {("verbose", "true")}
        assert parsed.headers == model.build_headers("preview")
        assert parsed.body == model.build_body()


class TestEscape:
    def test_escape_single_quotes(self):
        assert escape_single_quotes("it's") == "it'\\''s"

    def test_no_quotes_unchanged(self):
        assert escape_single_quotes('{"a":1}') == '{"a":1}'
