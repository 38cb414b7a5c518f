from __future__ import annotations

"""backend/errbit_debugger/services/diagnostics/ignore_filter.py

Exception ignore rules for remote reporting.

Exceptions are matched by type tag rather than by class hierarchy:
- a tag is either the short class name ("NotFoundError") or the dotted
  module path ("errbit_debugger.errors.NotFoundError")
- subtype relationships come from an explicit parents table, so rules can
  name exceptions from libraries that are not importable here

Ignored exceptions are only kept away from the remote sink. The pipeline
still hands them to the local diagnostics facility.
"""

from typing import Iterable, Mapping, Optional, Tuple


def type_tags(exc: BaseException | type) -> Tuple[str, ...]:
    """Return the tags an exception (or exception class) is known by."""
    cls = exc if isinstance(exc, type) else type(exc)
    return (cls.__name__, f"{cls.__module__}.{cls.__qualname__}")


class IgnoreFilter:
    """Decides whether an exception type tag is covered by the ignore list."""

    def __init__(
        self,
        ignored: Iterable[str] = (),
        parents: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> None:
        self._ignored = frozenset(ignored)
        self._parents = {tag: tuple(ps) for tag, ps in (parents or {}).items()}

    @property
    def ignored(self) -> frozenset[str]:
        return self._ignored

    def ancestors(self, tag: str) -> set[str]:
        """All transitive parents of *tag* in the table (cycles are tolerated)."""
        seen: set[str] = set()
        pending = list(self._parents.get(tag, ()))
        while pending:
            parent = pending.pop()
            if parent in seen:
                continue
            seen.add(parent)
            pending.extend(self._parents.get(parent, ()))
        seen.discard(tag)
        return seen

    def should_ignore(self, type_tag: str) -> bool:
        if not self._ignored:
            return False
        if type_tag in self._ignored:
            return True
        return not self._ignored.isdisjoint(self.ancestors(type_tag))

    def should_ignore_exception(self, exc: BaseException | type) -> bool:
        return any(self.should_ignore(tag) for tag in type_tags(exc))


def should_ignore(
    exception_type: str,
    ignore_list: Iterable[str],
    parents: Optional[Mapping[str, Iterable[str]]] = None,
) -> bool:
    """Functional shortcut for a one-off ignore check."""
    return IgnoreFilter(ignore_list, parents).should_ignore(exception_type)
