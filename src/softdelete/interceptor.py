"""
Save Interceptor

Turns pending deletes of soft-deletable entities into updates before the
session flushes them. Entities without the Deletable capability keep the
physical delete path.
"""

import logging
from typing import Iterable

from sqlalchemy import event
from sqlalchemy.orm import Session

from softdelete.change_tracking import ChangeRecord, ChangeState, tracked_changes

logger = logging.getLogger(__name__)


class SoftDeleteInterceptor:
    """Stateless before_flush hook; one instance can serve any number of sessions"""

    def rewrite(self, records: Iterable[ChangeRecord]) -> int:
        """
        Rewrite removed, soft-deletable records into modified ones

        Args:
            records: Change records of the batch about to be flushed

        Returns:
            Number of records rewritten
        """
        rewritten = 0
        for record in records:
            if record.state is not ChangeState.REMOVED or not record.soft_deletable:
                continue
            record.state = ChangeState.MODIFIED
            record.entity.mark_deleted()
            rewritten += 1
        return rewritten

    def before_flush(self, session: Session, flush_context, instances) -> None:
        rewritten = self.rewrite(tracked_changes(session, ChangeState.REMOVED))
        if rewritten:
            logger.info(f"Converted {rewritten} pending delete(s) into soft deletes")

    def attach(self, target) -> None:
        """Register on a Session, sessionmaker or Session class; repeated calls are ignored"""
        if not event.contains(target, "before_flush", self.before_flush):
            event.listen(target, "before_flush", self.before_flush)

    def detach(self, target) -> None:
        if event.contains(target, "before_flush", self.before_flush):
            event.remove(target, "before_flush", self.before_flush)
