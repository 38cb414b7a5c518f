from __future__ import annotations

"""backend/errbit_debugger/config/state.py

Immutable process/request state read by every pipeline stage.

A DebuggerState is built once from Settings before any handler can fire
and is never mutated afterwards. Per-request variants (a different remote
address) are derived copies.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, FrozenSet, Iterable, Optional

from errbit_debugger.errors import ConfigError
from errbit_debugger.services.diagnostics.error_classifier import ErrorKind

from .settings import Settings

if TYPE_CHECKING:
    from errbit_debugger.services.audit.store import AuditStore

ALL_KINDS = "all"


def parse_reportable_kinds(values: Iterable[str]) -> Optional[FrozenSet[ErrorKind]]:
    """Turn configured kind names into an allow-list.

    Returns None when the wildcard "all" is present, meaning every kind.
    """
    kinds: set[ErrorKind] = set()
    for raw in values:
        name = str(raw).strip().lower()
        if name == ALL_KINDS:
            return None
        try:
            kinds.add(ErrorKind(name))
        except ValueError:
            raise ConfigError(f"Unknown error kind in reportable_kinds: {raw!r}") from None
    return frozenset(kinds)


@dataclass(frozen=True)
class DebuggerState:
    """Read-only state shared by the handlers."""

    send_errors: bool = True
    console_mode: bool = False
    remote_address: str = ""
    audit_store: Optional["AuditStore"] = None
    # None means every kind is reportable
    reportable_kinds: Optional[FrozenSet[ErrorKind]] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        remote_address: str = "",
        audit_store: Optional["AuditStore"] = None,
    ) -> DebuggerState:
        return cls(
            send_errors=settings.send_errors,
            console_mode=settings.console_mode,
            remote_address=remote_address,
            audit_store=audit_store,
            reportable_kinds=parse_reportable_kinds(settings.reportable_kinds),
        )

    def is_reportable(self, kind: Optional[ErrorKind]) -> bool:
        if self.reportable_kinds is None:
            return True
        # Unrecognized kinds are only reportable under the wildcard.
        return kind is not None and kind in self.reportable_kinds

    def with_remote_address(self, remote_address: str) -> DebuggerState:
        return replace(self, remote_address=remote_address)
