import logging
import re
from typing import List, Tuple

from spring_visualizer.errors import AnnotationSyntaxError
from spring_visualizer.models.domain_models import (
    Annotation, AnnotationValue, ClassReference, LiteralValue, StringLiteral, ValueList
)

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r'@\s*([A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*)')
_KEY_RE = re.compile(r'([A-Za-z_$][\w$]*)\s*=(?!=)')
_CLASS_LITERAL_RE = re.compile(r'^([A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*?)\s*\.\s*class$')
_QUALIFIED_NAME_RE = re.compile(r'^[A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*$')
_KEYWORD_LITERALS = {'true', 'false', 'null'}
_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', '0': '\0',
            '"': '"', "'": "'", '\\': '\\'}
_OPENERS = {'(': ')', '[': ']', '{': '}'}


class JavaAnnotationParser:
    """Parses raw annotation text such as ``@Import({A.class, B.class})``.

    Accepted argument shapes are the bare form (``@Service``), a single value
    (``@Import(X.class)``, ``@ComponentScan("a")``), a brace list
    (``@ComponentScan({"a", "b"})``) and key/value pairs
    (``@ComponentScan(basePackages = {"a"})``). Values that are identifiers,
    optionally followed by ``.class``, become class references; string
    literals stay strings; anything else is kept as literal text.
    """

    def parse(self, text: str) -> Annotation:
        text = text.strip()
        match = _NAME_RE.match(text)
        if not match:
            raise AnnotationSyntaxError(text, "expected '@' followed by a name")
        name = re.sub(r'\s+', '', match.group(1))
        pos = self._skip_ws(text, match.end())
        if pos == len(text):
            return Annotation(name=name)
        if text[pos] != '(':
            raise AnnotationSyntaxError(text, f"unexpected {text[pos]!r} after name")

        arguments, keywords, pos = self._parse_arguments(text, pos + 1)
        pos = self._skip_ws(text, pos)
        if pos != len(text):
            raise AnnotationSyntaxError(text, f"trailing text {text[pos:]!r}")
        return Annotation(name=name, arguments=tuple(arguments), keywords=tuple(keywords))

    def parse_many(self, tokens: List[str]) -> Tuple[Annotation, ...]:
        """Parse a run of stacked annotations; any failure fails the whole run."""
        return tuple(self.parse(token) for token in tokens)

    def _parse_arguments(self, text: str, pos: int) -> Tuple[List[AnnotationValue], List[Tuple[str, AnnotationValue]], int]:
        arguments: List[AnnotationValue] = []
        keywords: List[Tuple[str, AnnotationValue]] = []
        pos = self._skip_ws(text, pos)
        if pos < len(text) and text[pos] == ')':
            return arguments, keywords, pos + 1

        while True:
            pos = self._skip_ws(text, pos)
            key_match = _KEY_RE.match(text, pos)
            if key_match:
                value, pos = self._parse_value(text, self._skip_ws(text, key_match.end()))
                keywords.append((key_match.group(1), value))
            else:
                value, pos = self._parse_value(text, pos)
                arguments.append(value)

            pos = self._skip_ws(text, pos)
            if pos >= len(text):
                raise AnnotationSyntaxError(text, "missing ')'")
            if text[pos] == ')':
                return arguments, keywords, pos + 1
            if text[pos] != ',':
                raise AnnotationSyntaxError(text, f"expected ',' or ')' at {text[pos:]!r}")
            pos += 1

    def _parse_value(self, text: str, pos: int) -> Tuple[AnnotationValue, int]:
        pos = self._skip_ws(text, pos)
        if pos >= len(text):
            raise AnnotationSyntaxError(text, "missing value")
        char = text[pos]
        if char == '{':
            return self._parse_list(text, pos + 1)
        if char == '"':
            value, end = self._parse_string(text, pos)
            # "a" + "b" and similar expressions are not plain literals
            if self._at_value_end(text, end):
                return StringLiteral(value), end
        return self._parse_expression(text, pos)

    def _parse_list(self, text: str, pos: int) -> Tuple[AnnotationValue, int]:
        items: List[AnnotationValue] = []
        while True:
            pos = self._skip_ws(text, pos)
            if pos >= len(text):
                raise AnnotationSyntaxError(text, "missing '}'")
            if text[pos] == '}':
                return ValueList(tuple(items)), pos + 1
            value, pos = self._parse_value(text, pos)
            items.append(value)
            pos = self._skip_ws(text, pos)
            if pos < len(text) and text[pos] == ',':
                pos += 1
            elif pos < len(text) and text[pos] != '}':
                raise AnnotationSyntaxError(text, f"expected ',' or '}}' at {text[pos:]!r}")

    def _parse_string(self, text: str, pos: int) -> Tuple[str, int]:
        if text.startswith('"""', pos):
            end = text.find('"""', pos + 3)
            if end == -1:
                raise AnnotationSyntaxError(text, "unterminated text block")
            return text[pos + 3:end], end + 3

        chars = []
        pos += 1
        while pos < len(text):
            char = text[pos]
            if char == '\\' and pos + 1 < len(text):
                chars.append(_ESCAPES.get(text[pos + 1], text[pos + 1]))
                pos += 2
                continue
            if char == '"':
                return ''.join(chars), pos + 1
            chars.append(char)
            pos += 1
        raise AnnotationSyntaxError(text, "unterminated string literal")

    def _parse_expression(self, text: str, pos: int) -> Tuple[AnnotationValue, int]:
        start = pos
        pieces: List[str] = []
        closers: List[str] = []
        while pos < len(text):
            char = text[pos]
            if self._at_comment(text, pos):
                pieces.append(text[start:pos])
                pos = self._skip_comment(text, pos)
                start = pos
                continue
            if char in ('"', "'"):
                pos = self._skip_quoted(text, pos)
                continue
            if char in _OPENERS:
                closers.append(_OPENERS[char])
            elif closers and char == closers[-1]:
                closers.pop()
            elif not closers and char in ',)}':
                break
            elif char in ')]}':
                raise AnnotationSyntaxError(text, f"unbalanced {char!r}")
            pos += 1
        if closers:
            raise AnnotationSyntaxError(text, f"missing {closers[-1]!r}")

        pieces.append(text[start:pos])
        expression = " ".join(piece.strip() for piece in pieces if piece.strip())
        if not expression:
            raise AnnotationSyntaxError(text, "missing value")
        return self._classify_expression(expression), pos

    def _classify_expression(self, expression: str) -> AnnotationValue:
        class_literal = _CLASS_LITERAL_RE.match(expression)
        if class_literal:
            return ClassReference(re.sub(r'\s+', '', class_literal.group(1)), is_class_literal=True)
        if _QUALIFIED_NAME_RE.match(expression) and expression not in _KEYWORD_LITERALS:
            return ClassReference(re.sub(r'\s+', '', expression), is_class_literal=False)
        return LiteralValue(expression)

    def _skip_quoted(self, text: str, pos: int) -> int:
        quote = text[pos]
        pos += 1
        while pos < len(text):
            if text[pos] == '\\':
                pos += 2
                continue
            if text[pos] == quote:
                return pos + 1
            pos += 1
        raise AnnotationSyntaxError(text, "unterminated literal")

    def _at_value_end(self, text: str, pos: int) -> bool:
        pos = self._skip_ws(text, pos)
        return pos >= len(text) or text[pos] in ',)}'

    def _skip_ws(self, text: str, pos: int) -> int:
        """Skip whitespace and comments."""
        while pos < len(text):
            if text[pos].isspace():
                pos += 1
            elif self._at_comment(text, pos):
                pos = self._skip_comment(text, pos)
            else:
                break
        return pos

    @staticmethod
    def _at_comment(text: str, pos: int) -> bool:
        return text.startswith('//', pos) or text.startswith('/*', pos)

    def _skip_comment(self, text: str, pos: int) -> int:
        if text.startswith('//', pos):
            end = text.find('\n', pos)
            return len(text) if end == -1 else end + 1
        end = text.find('*/', pos + 2)
        if end == -1:
            raise AnnotationSyntaxError(text, "unterminated comment")
        return end + 2
