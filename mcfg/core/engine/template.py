"""
Script templates — ``{{name}}`` substitution and command classification.

Grammar: literal text interleaved with variable references of the form
``{{name}}`` (spaces inside the braces are allowed, names use
``[A-Za-z0-9_\\-.:]``). A ``{{`` without a valid closing ``}}`` is
literal text; a closed ``{{ ... }}`` whose name breaks those rules
is an error in strict rendering.

Two renderers share the tokenizer:

    render(template, vars)          strict; UnknownVariable on a miss
    render_lenient(template, vars)  misses are left in place and logged

The rendered string is then classified: anything containing a shell
metacharacter needs ``<shell> -c``; everything else runs directly.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from mcfg.core.errors import TemplateError, UnknownVariable

logger = logging.getLogger(__name__)

_REFERENCE = re.compile(r"\{\{\s*([A-Za-z0-9_\-.:]+)\s*\}\}")
_MALFORMED = re.compile(r"\{\{.*?\}\}")

# Characters that only a shell can interpret
SHELL_METACHARACTERS = frozenset("|&;<>()$`\\\"'*?[]#~\n")

DEFAULT_SHELL = "/bin/sh"


@dataclass(frozen=True)
class Token:
    """A literal run (``is_var`` False) or a variable reference."""

    text: str
    is_var: bool = False


@dataclass(frozen=True)
class Command:
    """A rendered command, ready for ``subprocess.run``."""

    argv: list[str]
    shell: bool
    display: str


def tokenize(template: str) -> Iterator[Token]:
    position = 0
    for match in _REFERENCE.finditer(template):
        if match.start() > position:
            yield Token(template[position:match.start()])
        yield Token(match.group(1), is_var=True)
        position = match.end()
    if position < len(template):
        yield Token(template[position:])


def render(template: str, variables: Mapping[str, str]) -> str:
    """Substitute every reference.

    Raises:
        UnknownVariable: If a reference has no value.
        TemplateError: If a ``{{ ... }}`` span is not a valid reference.
    """
    parts: list[str] = []
    for token in tokenize(template):
        if not token.is_var:
            malformed = _MALFORMED.search(token.text)
            if malformed:
                raise TemplateError(
                    f"Invalid variable reference '{malformed.group(0)}' in script template"
                )
            parts.append(token.text)
        elif token.text in variables:
            parts.append(variables[token.text])
        else:
            raise UnknownVariable(token.text)
    return "".join(parts)


def render_lenient(template: str, variables: Mapping[str, str]) -> str:
    """Substitute what can be substituted; unknown references stay as written."""
    parts: list[str] = []
    for token in tokenize(template):
        if not token.is_var:
            parts.append(token.text)
        elif token.text in variables:
            parts.append(variables[token.text])
        else:
            logger.warning("No variable named '%s' to substitute", token.text)
            parts.append("{{" + token.text + "}}")
    return "".join(parts)


def needs_shell(rendered: str) -> bool:
    """True if the command uses any shell metacharacter."""
    return any(ch in SHELL_METACHARACTERS for ch in rendered)


def to_command(rendered: str, shell: str = DEFAULT_SHELL) -> Command:
    """Turn a rendered string into an argv.

    Raises:
        TemplateError: If the rendered command is empty.
    """
    text = rendered.strip()
    if not text:
        raise TemplateError("Script template rendered to an empty command")

    if needs_shell(text):
        return Command(
            argv=[shell, "-c", text],
            shell=True,
            display=f'{shell} -c "{text}"',
        )

    argv = text.split()
    return Command(argv=argv, shell=False, display=" ".join(argv))


def prepare(template: str, variables: Mapping[str, str]) -> Command:
    """Render and classify in one step, using the context's ``shell``."""
    rendered = render(template, variables)
    return to_command(rendered, shell=variables.get("shell") or DEFAULT_SHELL)
