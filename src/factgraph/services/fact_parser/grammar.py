"""
Grammar for the fact notation embedded in backend answers.

The notation has three independent pieces, each parsed here on its own:

- entity spans:   ``service:"risk mgmt" url=https://a.com page:"4"``
- relations:      ``(A) -[RELATION]-> (B)`` and the grouped continuations
                  ``-[RELATION]-> (B)`` / ``<-[RELATION]- (A)``
- citations:      ``[1][2]`` anywhere in an item, ``[1] https://...`` in the
                  sources block

Nothing in this module raises on malformed text; scanners return ``None`` and
callers decide whether to skip.
"""

import re
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple


CITATION_PATTERN = re.compile(r'\[(\d+)\]')
SOURCE_ENTRY_PATTERN = re.compile(r'\[(\d+)\]\s*(\S+)')

# Arrows are matched at a fixed position, so leading whitespace is part of them
OUTWARD_ARROW = re.compile(r'\s*-+\s*\[([^\]]+)\]->\s*')
INWARD_ARROW = re.compile(r'\s*<-\s*\[([^\]]+)\]-(?!>)\s*')

_ENTITY_TOKEN_PATTERN = re.compile(
    r'(?P<QUOTED_PAIR>(?P<qkey>[A-Za-z0-9_]+)\s*:\s*"(?P<qvalue>[^"]*)")'
    r'|(?P<ASSIGN>(?P<akey>[A-Za-z0-9_]+)=(?:"(?P<aquoted>[^"]*)"|(?P<avalue>[^\s)"]+)))'
    r'|(?P<SPACE>\s+)'
    r'|(?P<OTHER>"[^"]*"|[^\s"]|")'
)


class EntityToken(NamedTuple):
    """One lexical token of an entity span."""
    kind: str
    key: Optional[str]
    value: Optional[str]
    position: int


class EntitySpan(NamedTuple):
    """A parsed entity: its primary type/label pair and secondary attributes."""
    type: str
    label: str
    attributes: Dict[str, str]


class Triple(NamedTuple):
    """A ``(left) -[relation]-> (right)`` match inside a larger text."""
    left: str
    relation: str
    right: str
    start: int
    end: int


class Continuation(NamedTuple):
    """A grouped-layout line relating an entity to the current central entity."""
    direction: str  # 'out' or 'in'
    relation: str
    entity: str


def tokenize_entity_span(span: str) -> Iterator[EntityToken]:
    """
    Split an entity span into tokens.

    ``QUOTED_PAIR`` is ``key:"value"``, ``ASSIGN`` is ``key=value`` or
    ``key="value"``. Everything else comes out as ``OTHER`` so callers can see
    what was ignored. Whitespace is dropped.
    """
    for match in _ENTITY_TOKEN_PATTERN.finditer(span):
        kind = match.lastgroup
        if kind == 'SPACE':
            continue
        if kind == 'QUOTED_PAIR':
            yield EntityToken(kind, match.group('qkey'), match.group('qvalue'), match.start())
        elif kind == 'ASSIGN':
            value = match.group('aquoted')
            if value is None:
                value = match.group('avalue')
            yield EntityToken(kind, match.group('akey'), value, match.start())
        else:
            yield EntityToken('OTHER', None, match.group(0), match.start())


def parse_entity_span(span: str) -> Optional[EntitySpan]:
    """
    Parse an entity span into its primary ``type:"label"`` pair and attributes.

    The first ``key:"value"`` token with a non-blank value is the primary pair;
    every other pair (quoted or ``key=value``) becomes an attribute, the first
    occurrence of a key winning. Returns ``None`` when there is no primary pair.
    """
    primary: Optional[Tuple[str, str]] = None
    attributes: Dict[str, str] = {}

    for token in tokenize_entity_span(span):
        if token.kind == 'OTHER':
            continue
        if primary is None and token.kind == 'QUOTED_PAIR' and token.value.strip():
            primary = (token.key, token.value)
            continue
        if token.value:
            attributes.setdefault(token.key, token.value)

    if primary is None:
        return None

    return EntitySpan(type=primary[0], label=primary[1], attributes=attributes)


def read_group(text: str, pos: int, open_char: str = '(', close_char: str = ')') -> Optional[Tuple[str, int]]:
    """
    Read a bracketed group starting at ``pos``.

    Double-quoted runs may contain the closing character. Returns the inner
    text and the index just past the closing character, or ``None`` when the
    group is not closed.
    """
    if pos >= len(text) or text[pos] != open_char:
        return None

    in_quotes = False
    for i in range(pos + 1, len(text)):
        char = text[i]
        if char == '"':
            in_quotes = not in_quotes
        elif char == close_char and not in_quotes:
            return text[pos + 1:i], i + 1

    return None


def scan_triple(text: str) -> Optional[Triple]:
    """
    Find the first ``(left) -[relation]-> (right)`` in ``text``.

    Every opening parenthesis is tried as the left entity in turn, so prose
    in parentheses before the triple does not hide it.
    """
    pos = text.find('(')
    while pos != -1:
        triple = _triple_at(text, pos)
        if triple is not None:
            return triple
        pos = text.find('(', pos + 1)
    return None


def _triple_at(text: str, pos: int) -> Optional[Triple]:
    left = read_group(text, pos)
    if left is None:
        return None
    left_span, after_left = left

    arrow = OUTWARD_ARROW.match(text, after_left)
    if arrow is None:
        return None
    relation = arrow.group(1).strip()
    if not relation:
        return None

    right = read_group(text, arrow.end())
    if right is None:
        return None
    right_span, end = right

    return Triple(left=left_span, relation=relation, right=right_span, start=pos, end=end)


def scan_continuation(line: str) -> Optional[Continuation]:
    """
    Parse a grouped-layout continuation line.

    ``-[REL]-> (entity)`` points away from the central entity and
    ``<-[REL]- (entity)`` points towards it.
    """
    stripped = line.strip()
    for direction, arrow_pattern in (('in', INWARD_ARROW), ('out', OUTWARD_ARROW)):
        arrow = arrow_pattern.match(stripped)
        if arrow is None:
            continue
        relation = arrow.group(1).strip()
        group = read_group(stripped, arrow.end())
        if not relation or group is None:
            return None
        return Continuation(direction=direction, relation=relation, entity=group[0])
    return None


def scan_standalone_entity(line: str) -> Optional[EntitySpan]:
    """Parse a line made of one parenthesized entity, optionally followed by citations."""
    stripped = line.strip()
    group = read_group(stripped, 0)
    if group is None:
        return None
    return parse_entity_span(group[0])


def extract_citation_indices(text: str) -> List[int]:
    """Citation indices written as ``[n]``, in order of appearance, without duplicates."""
    return list(dict.fromkeys(int(m.group(1)) for m in CITATION_PATTERN.finditer(text)))


def parse_sources_block(block: Optional[str]) -> Dict[int, str]:
    """Parse ``[1] https://a [2] https://b`` into an index-to-URL table."""
    sources: Dict[int, str] = {}
    if not block:
        return sources

    for match in SOURCE_ENTRY_PATTERN.finditer(block):
        sources[int(match.group(1))] = match.group(2)
    return sources
