"""
Pulsefile grammar.

The syntax is declared once as a lark LALR grammar. Every known field is its
own production, so a known field with a value of the wrong type is a syntax
error; unknown fields and blocks have catch-all productions and are dropped
by the transformer. The transformer builds raw nodes that keep ``None`` for
absent fields so that defaults can be applied in a single pass afterwards
(see ``resolve.py``).
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from core.src.errors import ParseError

TRIGGER_FLAGS = (
    "on_push",
    "on_pull_request",
    "on_merge",
    "on_tag",
    "on_release",
    "on_branch_create",
    "on_branch_delete",
)

PULSEFILE_GRAMMAR = r"""
start: pipeline

pipeline: "pipeline" "{" _pipeline_item* "}" ";"?
_pipeline_item: name_field
    | version_field
    | triggers_block
    | steps_block
    | unknown_field
    | unknown_block

name_field: "name" ":" _text ";"
version_field: "version" ":" _text ";"

triggers_block: "triggers" "{" _triggers_item* "}" ";"?
_triggers_item: git_block | unknown_field | unknown_block

git_block: "git" "{" _git_item* "}" ";"?
_git_item: flag_field | branches_field | unknown_field | unknown_block
flag_field: flag ":" boolean ";"
!flag: "on_push" | "on_pull_request" | "on_merge" | "on_tag" | "on_release" | "on_branch_create" | "on_branch_delete"
branches_field: "branches" ":" string_list ";"
string_list: "[" "]"
    | "[" STRING ("," STRING)* ","? "]"

steps_block: "steps" "{" _steps_item* "}" ";"?
_steps_item: step | unknown_field | unknown_block

step: "step" STRING "{" _step_item* "}" ";"?
_step_item: run_field | allow_failure_field | unknown_field | unknown_block
run_field: "run" ":" _text ";"
allow_failure_field: "allow_failure" ":" boolean ";"

_text: STRING | MULTILINE
boolean: "true" -> true
    | "false" -> false

unknown_field: IDENT ":" _value ";"
unknown_block: IDENT "{" (unknown_field | unknown_block)* "}" ";"?
_value: STRING | MULTILINE | NUMBER | IDENT | value_list
value_list: "[" "]"
    | "[" _value ("," _value)* ","? "]"

// A run of more than three closing quotes ends with the last three.
MULTILINE.2: /\"\"\"[\s\S]*?\"\"\"(?!\")/
STRING: /"(?:[^"\\\n]|\\.)*"(?!")/
NUMBER: /-?\d+(?:\.\d+)*/
IDENT: /[A-Za-z_][A-Za-z0-9_\-.]*/
COMMENT: /(#|\/\/)[^\n]*/

%import common.WS
%ignore WS
%ignore COMMENT
"""

PULSEFILE_PARSER = Lark(PULSEFILE_GRAMMAR, parser="lalr", propagate_positions=True)

ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}
ESCAPE_RE = re.compile(r'\\(["\\nt])')
FIELD_BEFORE_RE = re.compile(r"([A-Za-z_][A-Za-z0-9_\-.]*)\s*:[^;{}]*$")
STEP_KEYWORD_BEFORE_RE = re.compile(r"\bstep\s*$")

TERMINAL_DESCRIPTIONS = {
    "STRING": "a string",
    "MULTILINE": "a string",
    "NUMBER": "a number",
    "IDENT": "a field name",
    "$END": "end of input",
}


@dataclass
class RawStep:
    name: str
    run: Optional[str] = None
    allow_failure: Optional[bool] = None
    line: int = 0


@dataclass
class RawGitTriggers:
    flags: Dict[str, bool] = field(default_factory=dict)
    branches: Optional[List[str]] = None


@dataclass
class RawPipeline:
    name: Optional[str] = None
    version: Optional[str] = None
    git: Optional[RawGitTriggers] = None
    steps: List[RawStep] = field(default_factory=list)


class PulsefileTransformer(Transformer):
    """Turns a lark parse tree into a ``RawPipeline``.

    Field productions become ``(key, value)`` pairs that the enclosing block
    collects. Unknown fields and blocks become ``None``.
    """

    def __init__(self, text: str):
        super().__init__()
        self.text = text

    def STRING(self, token):
        return ESCAPE_RE.sub(lambda m: ESCAPES[m.group(1)], token[1:-1])

    def MULTILINE(self, token):
        return token[3:-3].strip()

    def start(self, children):
        return children[0]

    def pipeline(self, children):
        raw = RawPipeline()
        for entry in filter(None, children):
            key, value = entry
            if key == "steps":
                raw.steps.extend(value)
            elif key == "git":
                raw.git = merge_git(raw.git, value)
            else:
                setattr(raw, key, value)
        return raw

    def name_field(self, children):
        return "name", children[0]

    def version_field(self, children):
        return "version", children[0]

    def triggers_block(self, children):
        git = None
        for entry in filter(None, children):
            git = merge_git(git, entry[1])
        return "git", git

    def git_block(self, children):
        git = RawGitTriggers()
        for entry in filter(None, children):
            key, value = entry
            if key == "branches":
                git.branches = value
            else:
                git.flags[key] = value
        return "git", git

    def flag_field(self, children):
        return children[0], children[1]

    def flag(self, children):
        return str(children[0])

    def branches_field(self, children):
        return "branches", children[0]

    def string_list(self, children):
        return list(children)

    def true(self, _):
        return True

    def false(self, _):
        return False

    def steps_block(self, children):
        return "steps", [step for step in children if isinstance(step, RawStep)]

    @v_args(meta=True)
    def step(self, meta, children):
        step = RawStep(name=children[0], line=meta.line)
        for entry in filter(None, children[1:]):
            key, value = entry
            setattr(step, key, value)
        if step.run is None:
            raise ParseError(
                f"step \"{step.name}\" has no 'run:' field",
                line=meta.line,
                column=meta.column,
                source_line=line_text(self.text, meta.line),
            )
        return step

    def run_field(self, children):
        return "run", children[0]

    def allow_failure_field(self, children):
        return "allow_failure", children[0]

    def unknown_field(self, _):
        return None

    def unknown_block(self, _):
        return None

    def value_list(self, _):
        return None


def merge_git(current: Optional[RawGitTriggers], update: Optional[RawGitTriggers]) -> Optional[RawGitTriggers]:
    if update is None:
        return current
    if current is None:
        return update
    current.flags.update(update.flags)
    if update.branches is not None:
        current.branches = update.branches
    return current


def parse_raw(text: str) -> RawPipeline:
    """Parse Pulsefile text into raw nodes. Raises ``ParseError``."""
    try:
        tree = PULSEFILE_PARSER.parse(text)
    except UnexpectedInput as e:
        raise translate_error(text, e) from None
    try:
        return PulsefileTransformer(text).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseError):
            raise e.orig_exc from None
        raise


# Error reporting

def line_text(text: str, line: int) -> str:
    lines = text.split("\n")
    if 1 <= line <= len(lines):
        return lines[line - 1].rstrip("\r")
    return ""


def open_blocks(text: str) -> List[tuple]:
    """Return ``(label, line)`` for every block still open at the end of ``text``."""
    stack = []
    previous = None
    try:
        for token in PULSEFILE_PARSER.lex(text, dont_ignore=True):
            if token.type in ("WS", "COMMENT"):
                continue
            if token.type == "LBRACE" and previous is not None:
                label = f"step \"{previous[1:-1]}\"" if previous.type == "STRING" else str(previous)
                stack.append((label, token.line))
            elif token.type == "RBRACE" and stack:
                stack.pop()
            previous = token
    except UnexpectedCharacters:
        # Blocks after a lexing error are not counted.
        pass
    return stack


def describe_terminal(name: str) -> str:
    if name in TERMINAL_DESCRIPTIONS:
        return TERMINAL_DESCRIPTIONS[name]
    try:
        pattern = PULSEFILE_PARSER.get_terminal(name).pattern
    except KeyError:
        return name
    return f"'{pattern.value}'"


def describe_token(token: Token) -> str:
    if token.type == "$END":
        return "end of input"
    if token.type in ("STRING", "MULTILINE"):
        return f"string {token}"
    return f"'{token}'"


def translate_error(text: str, error: UnexpectedInput) -> ParseError:
    """Turn a lark error into a ``ParseError`` with a readable message."""
    if isinstance(error, UnexpectedCharacters):
        if text.startswith('"""', error.pos_in_stream):
            message = "unterminated multiline string"
        elif error.char == '"':
            message = "unterminated string"
        else:
            message = f"unexpected character '{error.char}'"
        return ParseError(message, error.line, error.column, line_text(text, error.line))

    if isinstance(error, UnexpectedEOF):
        end_line = text.count("\n") + 1
        token = Token("$END", "", len(text), end_line, len(line_text(text, end_line)) + 1)
    elif isinstance(error, UnexpectedToken):
        token = error.token
    else:
        return ParseError(str(error))

    expected = set(error.expected) - {"WS", "COMMENT"}
    line = token.line if token.line is not None else 1
    column = token.column if token.column is not None else 1
    before = text[:token.start_pos] if token.start_pos is not None else text
    field_match = FIELD_BEFORE_RE.search(before)
    found = describe_token(token)

    if "PIPELINE" in expected:
        if token.type == "$END":
            message = "empty Pulsefile: expected a 'pipeline' block"
        else:
            message = f"expected 'pipeline' keyword, found {found}"
    elif token.type == "$END":
        blocks = open_blocks(text)
        if blocks:
            label, opened = blocks[-1]
            message = f"missing '}}' to close the '{label}' block opened at line {opened}"
        else:
            message = "unexpected end of input"
    elif not open_blocks(before) and "LBRACE" not in expected:
        message = f"unexpected {found} after the pipeline block"
    elif expected == {"SEMICOLON"} and field_match:
        message = f"expected ';' after the '{field_match.group(1)}' field, found {found}"
    elif expected <= {"STRING", "MULTILINE"} and STEP_KEYWORD_BEFORE_RE.search(before):
        message = f"expected a quoted step name after 'step', found {found}"
    elif expected <= {"STRING", "MULTILINE"} and field_match:
        message = f"expected a string for '{field_match.group(1)}', found {found}"
    elif expected <= {"TRUE", "FALSE"} and field_match:
        message = f"expected true or false for '{field_match.group(1)}', found {found}"
    elif "RBRACE" in expected and open_blocks(before):
        label, _ = open_blocks(before)[-1]
        message = f"unexpected {found} in the '{label}' block"
    else:
        choices = sorted({describe_terminal(name) for name in expected})
        message = f"expected {' or '.join(choices)}, found {found}"
    return ParseError(message, line, column, line_text(text, line))
