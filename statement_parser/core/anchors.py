"""
Label finding and value extraction over statement lines.

A label is a compiled regex; a value is whatever an extractor callable pulls
out of a line (a date, an amount, a list of amounts). Only the first line
carrying the label is considered, then a fixed window of lines below it.
"""
from typing import Any, Callable, Iterable, Iterator, List, NamedTuple, Optional, Pattern, Sequence
import logging

logger = logging.getLogger(__name__)


class LabelMatch(NamedTuple):
    """Position of a label in a list of lines."""
    index: int
    start: int
    end: int


def find_label(lines: Sequence[str], label: Pattern) -> Optional[LabelMatch]:
    """
    Find the first line containing a label.

    Args:
        lines: Lines to search
        label: Compiled label regex

    Returns:
        LabelMatch if found, None otherwise
    """
    for i, line in enumerate(lines):
        m = label.search(line)
        if m:
            return LabelMatch(i, m.start(), m.end())
    return None


def first_label(lines: Sequence[str], labels: Iterable[Pattern]) -> Optional[Pattern]:
    """Return the first label (in priority order) present anywhere in the lines."""
    for label in labels:
        if find_label(lines, label):
            return label
    return None


def _window(lines: Sequence[str], label: Pattern, window: int, exclude: Optional[Pattern],
            after_label: bool, include_label_line: bool) -> Iterator[str]:
    found = find_label(lines, label)
    if found is None:
        return

    logger.debug(f"Label '{label.pattern}' found on line {found.index}")

    if include_label_line:
        line = lines[found.index]
        yield line[found.end:] if after_label else line

    for line in lines[found.index + 1:found.index + 1 + window]:
        if exclude is not None and exclude.search(line):
            continue
        yield line


def locate_value(lines: Sequence[str], label: Pattern, extract: Callable[[str], Any],
                 window: int = 0, exclude: Optional[Pattern] = None,
                 after_label: bool = False, include_label_line: bool = True) -> Any:
    """
    Extract the first value found at or below a label.

    The label line is tried first (only the text after the label when
    ``after_label`` is set), then up to ``window`` following lines in
    order. Lines matching ``exclude`` are skipped.

    Args:
        lines: Statement lines
        label: Compiled label regex
        extract: Callable returning a value or None for one line
        window: Number of lines to scan below the label line
        exclude: Regex for lines that must not supply the value
        after_label: Restrict the label line to the text after the label
        include_label_line: Consider the label line at all

    Returns:
        The first non-None value, or None
    """
    for line in _window(lines, label, window, exclude, after_label, include_label_line):
        value = extract(line)
        if value is not None:
            return value
    return None


def collect_values(lines: Sequence[str], label: Pattern, extract: Callable[[str], Iterable[Any]],
                   window: int = 0, exclude: Optional[Pattern] = None,
                   after_label: bool = False, include_label_line: bool = True) -> List[Any]:
    """
    Same walk as ``locate_value`` but gather every value in the window.

    ``extract`` returns an iterable of values per line; the results are
    concatenated in line order.
    """
    values = []
    for line in _window(lines, label, window, exclude, after_label, include_label_line):
        values.extend(extract(line))
    return values
