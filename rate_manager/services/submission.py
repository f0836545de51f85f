"""
Submission Pipeline
===================

Flushes pending overrides to the PMS gateway.

The store is promoted optimistically before the gateway call returns;
if the push fails the pre-submission state is put back and the caller
gets a SubmissionFailure. Only one submission per property may be in
flight, a second one is rejected rather than queued.
"""

import logging

from rate_manager.domain import SubmissionOutcome, quantize_rate
from rate_manager.exceptions import ConcurrentSubmission, SubmissionFailure

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """
    Usage:
        pipeline = SubmissionPipeline(store, gateway)
        outcome = await pipeline.submit(prop.id, prop.pms_property_id, prop.base_room_type_id)
    """

    def __init__(self, store, gateway):
        self.store = store
        self.gateway = gateway
        self._in_flight = set()

    def is_in_flight(self, property_id):
        return property_id in self._in_flight

    @staticmethod
    def build_payload(snapshot):
        """Date-ordered [{'date', 'rate'}] list for the gateway."""
        return [
            {'date': stay_date.isoformat(), 'rate': quantize_rate(rate)}
            for stay_date, rate in sorted(snapshot.items())
        ]

    async def submit(self, property_id, pms_property_id, room_type_id):
        """
        Push all pending overrides.

        Returns:
            SubmissionOutcome with status 'noop' or 'submitted'

        Raises:
            ConcurrentSubmission: a submission is already running
            SubmissionFailure: the gateway failed; pending was restored
        """
        if property_id in self._in_flight:
            raise ConcurrentSubmission(
                f"A submission for property {property_id} is already in progress"
            )

        snapshot = self.store.snapshot()
        if not snapshot:
            return SubmissionOutcome(status='noop')

        committed_before = {
            d: r for d, r in self.store.committed_snapshot().items() if d in snapshot
        }
        payload = self.build_payload(snapshot)

        self._in_flight.add(property_id)
        acknowledged = False
        try:
            self.store.promote(snapshot.keys())
            logger.info("Submitting %d overrides for property %s", len(payload), property_id)

            try:
                ack = await self.gateway.submit_overrides(
                    property_id, pms_property_id, room_type_id, payload
                )
            except Exception as e:
                logger.exception("Override submission failed for property %s", property_id)
                raise SubmissionFailure(
                    f"Failed to submit {len(payload)} overrides: {e}",
                    dates=sorted(snapshot),
                ) from e
            acknowledged = True
        finally:
            if not acknowledged:
                # Also reached on cancellation; edits made while in flight win
                self.store.rollback(snapshot, committed_before)
            self._in_flight.discard(property_id)

        return SubmissionOutcome(status='submitted', submitted=snapshot, ack=ack)
