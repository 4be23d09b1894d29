"""Curl generator: renders the current request as a shell-safe curl command."""

from api_playground.request import RequestModel

CONTINUATION = " \\\n  "


def generate_curl(model: RequestModel) -> str:
    """Render ``model`` as a curl command.

    Returns an empty string when base URL, endpoint or method is missing.
    Header and body resolution is the same RequestModel logic the proxy
    uses, with the preview header set (Accept instead of Content-Type).
    """
    if not model.is_complete:
        return ""

    command = f'curl -X {model.method} "{model.build_url()}"'

    for name, value in model.build_headers("preview").items():
        command += f'{CONTINUATION}-H "{name}: {value}"'

    body = model.build_body(strict=False)
    if body:
        command += f"{CONTINUATION}-d '{escape_single_quotes(body)}'"

    return command


def escape_single_quotes(text: str) -> str:
    """Make ``text`` safe inside a single-quoted shell string."""
    return text.replace("'", "'\\''")
