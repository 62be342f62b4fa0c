import structlog

from ..domain.enums import GRADE_LABELS, Grade
from ..domain.errors import CatalogEmpty, StorageError
from ..domain.types import store_key
from ..utils.time import to_jst_iso, utcnow

logger = structlog.get_logger()


class ReviewSession:
    """Walks the due items of a catalog, one grading at a time.

    The due sequence is taken once when the session starts and kept until
    ``start()`` is called again, so grading does not reshuffle the cards
    mid-session. Selection wraps around at the end of the sequence.
    """

    def __init__(self, store, catalog, clock=utcnow):
        self.store = store
        self.catalog = tuple(catalog)
        if not self.catalog:
            raise CatalogEmpty("cannot start a review session without items")
        self.clock = clock
        self.queue = ()
        self.index = 0
        self.show_answer = False
        self.start()

    @property
    def total(self):
        return len(self.catalog)

    @property
    def remaining(self):
        return len(self.queue)

    def start(self):
        now = self.clock()
        self.queue = tuple(self.store.due_items(self.catalog, now))
        self.index = 0
        self.show_answer = False
        logger.info("session_started",
            total=self.total,
            due=len(self.queue),
            started_utc=now.isoformat(),
        )

    restart = start

    def get_next_card(self):
        return self.queue[self.index]

    def flip(self):
        self.show_answer = not self.show_answer
        return self.show_answer

    def grade_current_card(self, grade):
        grade = Grade(grade)
        item = self.get_next_card()
        key = store_key(item.id)
        logger.info("review_received",
            item_id=key,
            grade=int(grade),
            grade_label=GRADE_LABELS[grade],
        )

        try:
            state = self.store.apply(item.id, grade, self.clock())
        except StorageError as exc:
            # Stay on the same card so the caller can retry
            logger.warning("review_not_saved",
                item_id=key,
                error=str(exc),
                retryable=exc.retryable,
            )
            raise

        self.show_answer = False
        self.index = (self.index + 1) % len(self.queue)

        logger.info("review_scheduled",
            item_id=key,
            interval_days=state.interval_days,
            due_utc=state.due_at.isoformat(),
            due_jst=to_jst_iso(state.due_at),
        )
        return state
