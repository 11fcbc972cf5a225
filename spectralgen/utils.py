"""Identifier, label and description helpers shared by the reader and writer.

Word splitting follows the lodash conventions the Spectral SDK ecosystem uses
(``camelCase``/``startCase``), so generated identifiers and labels look the same
as hand-written components.
"""

import json
import re
import unicodedata
from typing import Any
from urllib.parse import urlparse

__all__ = (
    'KEYWORD_REPLACEMENTS',
    'camel_case',
    'clean_identifier',
    'create_description',
    'display_value',
    'header_case',
    'is_url',
    'number_to_words',
    'start_case',
    'to_group_tag',
    'unique_identifier',
    'words',
)

_WORD_PATTERN = re.compile(
    r'[A-Z]+(?=[A-Z][a-z])'  # acronym followed by a capitalized word: HTTPServer
    r'|[A-Z]?[a-z]+[0-9]*'  # lower or capitalized word: foo, Bar, foo2
    r'|[A-Z]+[0-9]*'  # trailing acronym: API, V2
    r'|[0-9]+'
)

_DIGIT_WORDS = {
    '0': 'zero',
    '1': 'one',
    '2': 'two',
    '3': 'three',
    '4': 'four',
    '5': 'five',
    '6': 'six',
    '7': 'seven',
    '8': 'eight',
    '9': 'nine',
}

_ONES = [
    'zero', 'one', 'two', 'three', 'four', 'five', 'six', 'seven', 'eight',
    'nine', 'ten', 'eleven', 'twelve', 'thirteen', 'fourteen', 'fifteen',
    'sixteen', 'seventeen', 'eighteen', 'nineteen',
]
_TENS = [
    '', '', 'twenty', 'thirty', 'forty', 'fifty', 'sixty', 'seventy', 'eighty',
    'ninety',
]
_SCALES = [
    (10**12, 'trillion'),
    (10**9, 'billion'),
    (10**6, 'million'),
    (10**3, 'thousand'),
]

# JavaScript/TypeScript reserved words plus the names generated perform
# functions already bind.
_RESERVED_WORDS = (
    'await', 'break', 'case', 'catch', 'class', 'const', 'continue',
    'debugger', 'delete', 'do', 'else', 'enum', 'export', 'extends', 'false',
    'finally', 'for', 'function', 'if', 'implements', 'import', 'in',
    'instanceof', 'let', 'new', 'null', 'package', 'return', 'static', 'super',
    'switch', 'this', 'throw', 'true', 'try', 'typeof', 'undefined', 'var',
    'void', 'while', 'with', 'yield', 'client',
)


def _with_article(word: str) -> str:
    article = 'an' if word[0] in 'aeiou' else 'a'
    return article + word[0].upper() + word[1:]


KEYWORD_REPLACEMENTS: dict[str, str] = {
    **{word: _with_article(word) for word in _RESERVED_WORDS},
    'default': 'defaultValue',
    'public': 'isPublic',
    'protected': 'isProtected',
    'private': 'isPrivate',
    'interface': 'anInterface',
    'context': 'ctx',
    'data': 'aData',
}

# Group tags name files under src/actions/, next to the generated index.ts.
GROUP_TAG_REPLACEMENTS: dict[str, str] = {
    'index': 'indexGroup',
}


def is_url(text):
    try:
        result = urlparse(text)
        return result.scheme in ('http', 'https') and bool(result.netloc)
    except (TypeError, ValueError, AttributeError):
        return False


def remove_accents(input_str: str) -> str:
    nfkd_form = unicodedata.normalize('NFKD', input_str)
    return ''.join(c for c in nfkd_form if not unicodedata.combining(c))


def words(value: str) -> list[str]:
    """Split a string into words on separators, case humps and digit runs."""
    return _WORD_PATTERN.findall(remove_accents(str(value)))


def camel_case(value: str) -> str:
    """Convert a string to camelCase (``"foo-bar baz"`` -> ``"fooBarBaz"``)."""
    parts = words(value)
    if not parts:
        return ''
    head, *tail = parts
    return head.lower() + ''.join(part[0].upper() + part[1:].lower() for part in tail)


def start_case(value: Any) -> str:
    """Convert a value to Start Case (``"userId"`` -> ``"User Id"``)."""
    return ' '.join(part[0].upper() + part[1:] for part in words(str(value)))


def header_case(value: str) -> str:
    """Capitalize each word of a header-like name, keeping its separators."""
    return re.sub(
        r'[A-Za-z0-9]+', lambda match: match.group()[0].upper() + match.group()[1:], value
    )


def number_to_words(number: int) -> str:
    """Spell out an integer in English (``123`` -> ``"one hundred twenty-three"``)."""
    if number < 0:
        return f'minus {number_to_words(-number)}'
    if number < 20:
        return _ONES[number]
    if number < 100:
        tens, rest = divmod(number, 10)
        return _TENS[tens] + (f'-{_ONES[rest]}' if rest else '')
    if number < 1000:
        hundreds, rest = divmod(number, 100)
        spelled = f'{_ONES[hundreds]} hundred'
        return f'{spelled} {number_to_words(rest)}' if rest else spelled

    scale, name = next((scale, name) for scale, name in _SCALES if number >= scale)
    head, rest = divmod(number, scale)
    spelled = f'{number_to_words(head)} {name}'
    return f'{spelled} {number_to_words(rest)}' if rest else spelled


def clean_identifier(value: str) -> str:
    """Convert an upstream name into a safe TypeScript identifier.

    - Reserved words are replaced using KEYWORD_REPLACEMENTS
    - Any other non-alphanumeric characters act as camelCase word boundaries
    - A leading digit is spelled out (``"12345foobar"`` -> ``"one2345Foobar"``)

    Returns an empty string when the value contains nothing usable.
    """
    if value in KEYWORD_REPLACEMENTS:
        return KEYWORD_REPLACEMENTS[value]

    sanitized = camel_case(value)
    if sanitized in KEYWORD_REPLACEMENTS:
        return KEYWORD_REPLACEMENTS[sanitized]

    if sanitized and sanitized[0].isdigit():
        sanitized = _DIGIT_WORDS[sanitized[0]] + sanitized[1:]
    return sanitized


def unique_identifier(value: str, seen: frozenset[str]) -> tuple[str, frozenset[str]]:
    """Sanitize ``value`` into an identifier that is not already in ``seen``.

    On a collision the identifier is re-derived from ``"other " + value``
    (repeatedly, if that collides as well).

    Returns:
        Tuple of (identifier, seen set extended with the identifier).
    """
    source = value
    key = clean_identifier(source)
    while not key or key in seen:
        source = f'other {source}'
        key = clean_identifier(source)
    return key, seen | {key}


def to_group_tag(path: str) -> str:
    """Convert an API path into the tag used to group its actions.

    The first non-empty path segment is camelCased; ``/`` maps to ``"root"``
    and a leading number is spelled out (``"/2fa/x"`` -> ``"twoFa"``).
    """
    segment = next((part for part in path.split('/') if part), None)
    if segment is None:
        return 'root'

    leading_digits = re.match(r'[0-9]+', segment)
    if leading_digits:
        spelled = number_to_words(int(leading_digits.group()))
        segment = f'{spelled} {segment[leading_digits.end():]}'

    tag = camel_case(segment)
    if not tag:
        return 'root'
    if tag in GROUP_TAG_REPLACEMENTS:
        return GROUP_TAG_REPLACEMENTS[tag]
    return KEYWORD_REPLACEMENTS.get(tag, tag)


def _strip_html(text: str) -> str:
    """Strip HTML tags."""
    return re.sub(r'<[^>]+>', '', text)


def create_description(text: str | None) -> str | None:
    """Reduce free-form API documentation to a one-line description.

    HTML tags are removed and the first sentence of the first non-empty line
    is kept. Returns None when nothing is left.
    """
    if not text:
        return None

    lines = [line for line in _strip_html(text).splitlines() if line.strip()]
    if not lines:
        return None

    fragment = re.split(r'[.!?]', lines[0])[0].strip()
    return fragment or None


def display_value(value: Any) -> str:
    """Render a schema value (enum member, default, example) as a string."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)
