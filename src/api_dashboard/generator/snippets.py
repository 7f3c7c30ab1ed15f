"""Snippet generator: renders the explorer's current request as source code.

Each language is a pure formatting function over a PreparedCall. Drafts are
resolved with the same ``prepare_call`` the live sender uses, so a snippet
reproduces the request byte for byte (URL, method, headers and body text).
"""

import json
import shlex
from collections.abc import Callable

from api_dashboard.request.builder import prepare_call
from api_dashboard.request.draft import Language, PreparedCall, RequestDraft

PLACEHOLDER_TOKEN = "YOUR_API_KEY"


def _literal(text: str) -> str:
    """Double-quoted string literal valid in JavaScript, TypeScript, Python and Go."""
    return json.dumps(text, ensure_ascii=False)


def _javascript(call: PreparedCall) -> str:
    headers = ",\n".join(f"    {_literal(k)}: {_literal(v)}" for k, v in call.headers.items())
    options = [f'  method: "{call.method}"', f"  headers: {{\n{headers}\n  }}"]
    if call.body is not None:
        options.append(f"  body: {_literal(call.body)}")
    return (
        "// Using fetch API\n"
        f"fetch({_literal(call.url)}, {{\n"
        + ",\n".join(options)
        + "\n})\n"
        "  .then(response => response.json())\n"
        "  .then(data => console.log(data))\n"
        '  .catch(error => console.error("Error:", error));'
    )


def _typescript(call: PreparedCall) -> str:
    headers = "\n".join(f"  {_literal(k)}: {_literal(v)}," for k, v in call.headers.items())
    lines = [
        "// Using fetch API",
        f"const url: string = {_literal(call.url)};",
        f"const headers: Record<string, string> = {{\n{headers}\n}};",
    ]
    options = [f'  method: "{call.method}",', "  headers,"]
    if call.body is not None:
        lines.append(f"const body: string = {_literal(call.body)};")
        options.append("  body,")
    lines += [
        "",
        "const response: Response = await fetch(url, {\n" + "\n".join(options) + "\n});",
        "const data: unknown = await response.json();",
        "console.log(data);",
    ]
    return "\n".join(lines)


def _python(call: PreparedCall) -> str:
    headers = "\n".join(f"    {_literal(k)}: {_literal(v)}," for k, v in call.headers.items())
    lines = [
        "# Using requests library",
        "import requests",
        "",
        f"url = {_literal(call.url)}",
        f"headers = {{\n{headers}\n}}",
    ]
    if call.body is not None:
        lines += [
            f"payload = {_literal(call.body)}",
            "",
            f'response = requests.request("{call.method}", url, headers=headers, data=payload.encode("utf-8"))',
        ]
    else:
        lines += ["", f'response = requests.request("{call.method}", url, headers=headers)']
    lines.append("print(response.json())")
    return "\n".join(lines)


def _curl(call: PreparedCall) -> str:
    parts = [f"curl -X {call.method} {shlex.quote(call.url)}"]
    parts += [f"  -H {shlex.quote(f'{k}: {v}')}" for k, v in call.headers.items()]
    if call.body is not None:
        # -d would read a file for a body starting with "@"
        parts.append(f"  --data-raw {shlex.quote(call.body)}")
    return " \\\n".join(parts)


def _go(call: PreparedCall) -> str:
    imports = ['"fmt"', '"io"', '"net/http"']
    if call.body is not None:
        imports.append('"strings"')
        request = (
            f"\tpayload := strings.NewReader({_literal(call.body)})\n\n"
            f'\treq, err := http.NewRequest("{call.method}", url, payload)\n'
        )
    else:
        request = f'\treq, err := http.NewRequest("{call.method}", url, nil)\n'
    header_lines = "".join(f"\treq.Header.Set({_literal(k)}, {_literal(v)})\n" for k, v in call.headers.items())
    import_block = "\n".join(f"\t{name}" for name in imports)
    return (
        "// Using net/http package\n"
        "package main\n\n"
        f"import (\n{import_block}\n)\n\n"
        "func main() {\n"
        f"\turl := {_literal(call.url)}\n"
        f"{request}"
        "\tif err != nil {\n\t\tpanic(err)\n\t}\n\n"
        f"{header_lines}\n"
        "\tresp, err := http.DefaultClient.Do(req)\n"
        "\tif err != nil {\n\t\tpanic(err)\n\t}\n"
        "\tdefer resp.Body.Close()\n\n"
        "\tbody, err := io.ReadAll(resp.Body)\n"
        "\tif err != nil {\n\t\tpanic(err)\n\t}\n"
        "\tfmt.Println(string(body))\n"
        "}"
    )


def _ruby_literal(text: str) -> str:
    # "#" starts interpolation inside Ruby double-quoted strings
    return _literal(text).replace("#", "\\#")


def _ruby(call: PreparedCall) -> str:
    lines = [
        "# Using net/http",
        'require "net/http"',
        'require "uri"',
        "",
        f"uri = URI({_ruby_literal(call.url)})",
        "http = Net::HTTP.new(uri.host, uri.port)",
        'http.use_ssl = uri.scheme == "https"',
        "",
        f"request = Net::HTTP::{call.method.capitalize()}.new(uri)",
    ]
    lines += [f"request[{_ruby_literal(k)}] = {_ruby_literal(v)}" for k, v in call.headers.items()]
    if call.body is not None:
        lines.append(f"request.body = {_ruby_literal(call.body)}")
    lines += ["", "response = http.request(request)", "puts response.body"]
    return "\n".join(lines)


GENERATORS: dict[Language, Callable[[PreparedCall], str]] = {
    Language.JAVASCRIPT: _javascript,
    Language.TYPESCRIPT: _typescript,
    Language.PYTHON: _python,
    Language.CURL: _curl,
    Language.GO: _go,
    Language.RUBY: _ruby,
}


def supported_languages() -> list[str]:
    return [language.value for language in Language]


def snippet_call(draft: RequestDraft, base_url: str = "") -> PreparedCall:
    """The call a snippet embeds: the sender's call, with a placeholder when no token is set."""
    if not draft.auth_token:
        draft = draft.model_copy(update={"auth_token": PLACEHOLDER_TOKEN})
    return prepare_call(draft, base_url)


def generate(draft: RequestDraft, language: Language | str | None = None, base_url: str = "") -> str:
    """Render the draft as a snippet in the given language (default: the draft's own).

    Raises ValueError for unknown languages.
    """
    target = Language(language) if language is not None else draft.target_language
    return GENERATORS[target](snippet_call(draft, base_url))
