"""
Bank profile plumbing.

A profile is the generic baseline followed by an ordered list of override
steps. Each step takes the current record and the document and returns a
new record; records are frozen, so steps never mutate their input.
"""
from functools import cached_property
from typing import Callable, List, Optional, Sequence
import logging

from ..generic import parse_generic
from ..normalize import normalize_text, split_lines
from ..templates import BankTemplate, get_template
from ...models.schema import ParsedStatement

logger = logging.getLogger(__name__)


class Document:
    """Normalized statement text plus the template of the profile reading it."""

    def __init__(self, text: str, template: BankTemplate):
        self.text = text
        self.template = template

    @cached_property
    def lines(self) -> List[str]:
        return split_lines(self.text)

    def head(self, limit: Optional[int] = None) -> str:
        """Leading characters (the template's ``document_chars`` by default)."""
        if limit is None:
            limit = self.template.limit("document_chars", 20000)
        return self.text[:limit]

    def head_lines(self, limit: Optional[int] = None) -> List[str]:
        return split_lines(self.head(limit))


Step = Callable[[ParsedStatement, Document], ParsedStatement]


def override(record: ParsedStatement, **fields) -> ParsedStatement:
    """
    Copy a record, replacing only fields that have a value.

    None and empty lists leave the baseline value in place.
    """
    update = {k: v for k, v in fields.items() if v is not None and v != []}
    if not update:
        return record
    logger.debug(f"Overriding fields: {', '.join(sorted(update))}")
    return record.model_copy(update=update)


class BankProfile:
    """Generic baseline plus a bank's override chain."""

    def __init__(self, bank_id: str, steps: Sequence[Step],
                 prepare: Optional[Callable[[str], str]] = None):
        self.bank_id = bank_id
        self.steps = list(steps)
        self.prepare = prepare

    @property
    def template(self) -> BankTemplate:
        return get_template(self.bank_id)

    def parse(self, text: str) -> ParsedStatement:
        """
        Parse statement text with this profile.

        Args:
            text: Raw statement text

        Returns:
            ParsedStatement
        """
        text = text or ""
        if self.prepare is not None:
            text = self.prepare(text)
        text = normalize_text(text)

        record = parse_generic(text)
        document = Document(text, self.template)
        for step in self.steps:
            record = step(record, document)

        logger.debug(f"Profile {self.bank_id} finished")
        return record

    def __repr__(self):
        return f"BankProfile('{self.bank_id}')"
