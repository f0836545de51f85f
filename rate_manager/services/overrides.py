"""
Override Store
==============

Two parallel date → base rate mappings:

    pending    - edited locally, not yet acknowledged by the PMS
    committed  - last value the PMS accepted (or a manual rate found on load)

Per-date lifecycle:

    UNSET ──edit──▶ PENDING ──submit ok──▶ COMMITTED ──edit──▶ PENDING
                       ▲                       │
                       └──── submit failed ────┘
    clear removes the pending entry only.
"""

import enum
from types import MappingProxyType

from rate_manager.domain import as_date, to_decimal


class OverrideState(enum.Enum):
    UNSET = 'unset'
    PENDING = 'pending'
    COMMITTED = 'committed'


class OverrideStore:
    """In-memory pending/committed override maps for one property."""

    def __init__(self, committed=None):
        self._pending = {}
        self._committed = {}
        if committed:
            self.seed_committed(committed)

    @property
    def pending(self):
        return MappingProxyType(self._pending)

    @property
    def committed(self):
        return MappingProxyType(self._committed)

    def __len__(self):
        return len(self._pending)

    def has_pending(self):
        return bool(self._pending)

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def set_pending(self, stay_date, base_rate):
        """Insert or overwrite the pending override for a date."""
        self._pending[as_date(stay_date)] = to_decimal(base_rate)

    def clear_pending(self, stay_date):
        """Remove the pending override for a date (committed is untouched)."""
        self._pending.pop(as_date(stay_date), None)

    def discard_pending(self):
        self._pending.clear()

    def effective(self, stay_date):
        """Pending value, else committed value, else None."""
        stay_date = as_date(stay_date)
        if stay_date in self._pending:
            return self._pending[stay_date]
        return self._committed.get(stay_date)

    def state(self, stay_date):
        stay_date = as_date(stay_date)
        if stay_date in self._pending:
            return OverrideState.PENDING
        if stay_date in self._committed:
            return OverrideState.COMMITTED
        return OverrideState.UNSET

    # -------------------------------------------------------------------------
    # Submission support
    # -------------------------------------------------------------------------

    def snapshot(self):
        """Copy of the pending map."""
        return dict(self._pending)

    def committed_snapshot(self):
        return dict(self._committed)

    def seed_committed(self, mapping):
        """Replace committed wholesale (used when a calendar is loaded)."""
        self._committed = {as_date(d): to_decimal(r) for d, r in mapping.items()}

    def promote(self, dates):
        """
        Move the named pending entries into committed.

        Dates without a pending entry are ignored. Both maps are rebuilt
        before being swapped in, so callers never observe a half-applied
        promotion.
        """
        dates = {as_date(d) for d in dates}
        moved = {d: r for d, r in self._pending.items() if d in dates}
        committed = dict(self._committed)
        committed.update(moved)
        pending = {d: r for d, r in self._pending.items() if d not in moved}
        self._committed = committed
        self._pending = pending
        return moved

    def rollback(self, snapshot, committed_before):
        """
        Undo a promotion of ``snapshot`` that the PMS never acknowledged.

        Only the snapshot's dates are touched. A date edited again since
        the snapshot keeps its newer pending value; committed goes back
        to its value in ``committed_before``, or is dropped when it had
        none. Entries for other dates, such as a committed seed from a
        load that finished in the meantime, are left alone.
        """
        pending = dict(self._pending)
        committed = dict(self._committed)
        for stay_date, rate in snapshot.items():
            stay_date = as_date(stay_date)
            pending.setdefault(stay_date, to_decimal(rate))
            if stay_date in committed_before:
                committed[stay_date] = to_decimal(committed_before[stay_date])
            else:
                committed.pop(stay_date, None)
        self._committed = committed
        self._pending = pending

    def restore(self, snapshot, committed=None):
        """
        Replace pending wholesale with a prior snapshot.

        Args:
            snapshot: dict date → rate to become the pending map
            committed: optional dict to become the committed map, used to
                undo an optimistic promotion
        """
        self._pending = {as_date(d): to_decimal(r) for d, r in snapshot.items()}
        if committed is not None:
            self.seed_committed(committed)
