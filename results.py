"""
Render-ready analysis results

Every analysis answers with exactly one of these variants. Each serializes to
a dict with a 'type' tag so the front end can switch on it.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class TextResult:
    text: str

    def to_dict(self) -> dict:
        return {'type': 'text', 'text': self.text}


@dataclass(frozen=True)
class ListResult:
    items: Tuple[str, ...]
    heading: Optional[str] = None
    total_count: Optional[int] = None
    truncated: bool = False

    def to_dict(self) -> dict:
        return {
            'type': 'list',
            'items': list(self.items),
            'heading': self.heading,
            'total_count': self.total_count if self.total_count is not None else len(self.items),
            'truncated': self.truncated,
        }


@dataclass(frozen=True)
class SectionsResult:
    """Titled groups of items (indicator sub-categories)"""
    sections: Tuple[Tuple[str, Tuple[str, ...]], ...]

    def to_dict(self) -> dict:
        return {
            'type': 'sections',
            'sections': [{'title': title, 'items': list(items)} for title, items in self.sections],
        }


@dataclass(frozen=True)
class PatternQuery:
    """Hand-off to an external pattern-search service"""
    service: str
    pattern: str
    url: str

    def to_dict(self) -> dict:
        return {'type': 'pattern', 'service': self.service, 'pattern': self.pattern, 'url': self.url}


@dataclass(frozen=True)
class Pending:
    message: str

    def to_dict(self) -> dict:
        return {'type': 'pending', 'message': self.message}


@dataclass(frozen=True)
class NotReady:
    message: str

    def to_dict(self) -> dict:
        return {'type': 'not_ready', 'message': self.message}


@dataclass(frozen=True)
class ErrorMessage:
    message: str

    def to_dict(self) -> dict:
        return {'type': 'error', 'message': self.message}


@dataclass(frozen=True)
class NoSelection:
    message: str = 'Select some letters to see results'

    def to_dict(self) -> dict:
        return {'type': 'no_selection', 'message': self.message}


Result = Union[
    TextResult, ListResult, SectionsResult, PatternQuery,
    Pending, NotReady, ErrorMessage, NoSelection,
]
