"""Run code snippets on a remote online compiler."""

from __future__ import annotations

import os

import requests

API_URL = "https://tool.runoob.com/compile2.php"
API_TOKEN = os.environ.get("RUNCODE_TOKEN", "token")
TIMEOUT = 15
MAX_LINES = 30
MAX_CHARS = 1000
CUT_MARKER = "\n............\n............"
NO_ERRORS = "\n\n"

HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
    "Referer": "https://c.runoob.com/",
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 6.1; Win64; x64; rv:87.0) "
        "Gecko/20100101 Firefox/87.0"
    ),
}

_HELLO_JS = 'console.log("Hello World!");'
_HELLO_RUBY = 'puts "Hello World!";'
_HELLO_CPP = (
    "#include <iostream>\nusing namespace std;\n\nint main()\n{\n"
    '   cout << "Hello World";\n   return 0;\n}'
)
_HELLO_RUST = 'fn main() {\n    println!("Hello World!");\n}'
_HELLO_CS = (
    "using System;\nnamespace HelloWorldApplication\n{\n   class HelloWorld\n   {\n"
    "      static void Main(string[] args)\n      {\n"
    '         Console.WriteLine("Hello World!");\n      }\n   }\n}'
)
_HELLO_SHELL = "echo 'Hello World!'"
_HELLO_PY3 = 'print("Hello, World!")'
_HELLO_SWIFT = 'var myString = "Hello, World!"\nprint(myString)'
_HELLO_KOTLIN = 'fun main(args : Array<String>){\n    println("Hello World!")\n}'
_HELLO_TS = 'const hello : string = "Hello World!"\nconsole.log(hello)'

TEMPLATES = {
    "py2": "print 'Hello World!'",
    "ruby": _HELLO_RUBY,
    "rb": _HELLO_RUBY,
    "php": "<?php\n\techo 'Hello World!';\n?>",
    "javascript": _HELLO_JS,
    "js": _HELLO_JS,
    "node.js": _HELLO_JS,
    "scala": (
        "object Main {\n  def main(args:Array[String])\n  {\n"
        '    println("Hello World!")\n  }\n\t\t\n}'
    ),
    "go": (
        'package main\n\nimport "fmt"\n\nfunc main() {\n'
        '   fmt.Println("Hello, World!")\n}'
    ),
    "c": (
        "#include <stdio.h>\n\nint main()\n{\n"
        '   printf("Hello, World! \n");\n   return 0;\n}'
    ),
    "c++": _HELLO_CPP,
    "cpp": _HELLO_CPP,
    "java": (
        "public class HelloWorld {\n    public static void main(String []args) {\n"
        '       System.out.println("Hello World!");\n    }\n}'
    ),
    "rust": _HELLO_RUST,
    "rs": _HELLO_RUST,
    "c#": _HELLO_CS,
    "cs": _HELLO_CS,
    "csharp": _HELLO_CS,
    "shell": _HELLO_SHELL,
    "bash": _HELLO_SHELL,
    "erlang": (
        "% escript will ignore the first line\n\nmain(_) ->\n"
        '    io:format("Hello World!~n").'
    ),
    "perl": 'print "Hello, World!\n";',
    "python": _HELLO_PY3,
    "py": _HELLO_PY3,
    "swift": _HELLO_SWIFT,
    "lua": _HELLO_SWIFT,
    "pascal": "runcode Hello;\nbegin\n  writeln ('Hello, world!')\nend.",
    "kotlin": _HELLO_KOTLIN,
    "kt": _HELLO_KOTLIN,
    "r": 'myString <- "Hello, World!"\nprint ( myString)',
    "vb": (
        "Module Module1\n\n    Sub Main()\n"
        '        Console.WriteLine("Hello World!")\n    End Sub\n\nEnd Module'
    ),
    "typescript": _HELLO_TS,
    "ts": _HELLO_TS,
}

LANGUAGES: dict[str, tuple[str, str]] = {
    "py2": ("0", "py"),
    "ruby": ("1", "rb"),
    "rb": ("1", "rb"),
    "php": ("3", "php"),
    "javascript": ("4", "js"),
    "js": ("4", "js"),
    "node.js": ("4", "js"),
    "scala": ("5", "scala"),
    "go": ("6", "go"),
    "c": ("7", "c"),
    "c++": ("7", "cpp"),
    "cpp": ("7", "cpp"),
    "java": ("8", "java"),
    "rust": ("9", "rs"),
    "rs": ("9", "rs"),
    "c#": ("10", "cs"),
    "cs": ("10", "cs"),
    "csharp": ("10", "cs"),
    "shell": ("10", "sh"),
    "bash": ("10", "sh"),
    "erlang": ("12", "erl"),
    "perl": ("14", "pl"),
    "python": ("15", "py3"),
    "py": ("15", "py3"),
    "swift": ("16", "swift"),
    "lua": ("17", "lua"),
    "pascal": ("18", "pas"),
    "kotlin": ("19", "kt"),
    "kt": ("19", "kt"),
    "r": ("80", "r"),
    "vb": ("84", "vb"),
    "typescript": ("1010", "ts"),
    "ts": ("1010", "ts"),
}

UNSUPPORTED = "语言不是受支持的编程语种呢~"


class RunCodeError(Exception):
    """Raised when a language is unknown or the remote run fails."""


def clear_newline_suffix(text: str) -> str:
    """Drop every trailing newline."""
    return text.rstrip("\n")


def cut_too_long(text: str) -> str:
    """Cut text that passes 30 lines or 1000 characters."""
    count = 0
    last = len(text) - 1
    for index, char in enumerate(text):
        if char == "\r" and index < last and text[index + 1] == "\n":
            pass
        elif char in "\n\r":
            count += 1
        if count > MAX_LINES or index > MAX_CHARS:
            return text[: max(0, index - 1)] + CUT_MARKER
    return text


def lookup_language(language: str) -> tuple[str, str]:
    """The compiler's language id and file extension for a language name."""
    try:
        return LANGUAGES[language.lower()]
    except KeyError:
        raise RunCodeError(UNSUPPORTED) from None


def template(language: str) -> str:
    """A hello-world example for the language."""
    try:
        return TEMPLATES[language.lower()]
    except KeyError:
        raise RunCodeError(UNSUPPORTED) from None


def run_code(code: str, run_type: tuple[str, str]) -> str:
    """Send code to the compiler and return its trimmed output."""
    language_id, file_ext = run_type
    form = {
        "code": code,
        "token": API_TOKEN,
        "stdin": "",
        "language": language_id,
        "fileext": file_ext,
    }
    try:
        response = requests.post(API_URL, data=form, headers=HEADERS, timeout=TIMEOUT)
    except requests.RequestException as exc:
        raise RunCodeError(str(exc)) from exc
    if response.status_code != 200:
        raise RunCodeError("code not 200")
    try:
        content = response.json()
    except ValueError as exc:
        raise RunCodeError(str(exc)) from exc
    if not isinstance(content, dict):
        content = {}
    errors = content.get("errors")
    errors = errors if isinstance(errors, str) else ""
    if errors != NO_ERRORS:
        raise RunCodeError(cut_too_long(clear_newline_suffix(errors)))
    output = content.get("output")
    output = output if isinstance(output, str) else ""
    return cut_too_long(clear_newline_suffix(output))