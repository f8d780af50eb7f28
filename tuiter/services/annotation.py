"""
Tuiter Backend — Tuit Annotation Service
==========================================

What:  Decorates a list of tuits with viewer-relative flags: likedByMe,
       dislikedByMe, bookmarkedByMe and ownedByMe.
How:   Fans out one existence lookup per (relation, tuit) against the like,
       dislike and bookmark stores, waits on one barrier per relation, then
       merges the hits by tuit id into shallow copies of the input.
Who:   Called by every route that lists tuits.
When:  After the tuits themselves were fetched; the input is a materialized list.

Fan-out / fan-in:
    tuits = [T1, T2, T3]

    likes.find_by_pair(v, T1)      dislikes.find_by_pair(v, T1)     bookmarks...
    likes.find_by_pair(v, T2)      dislikes.find_by_pair(v, T2)     bookmarks...
    likes.find_by_pair(v, T3)      dislikes.find_by_pair(v, T3)     bookmarks...
            │                              │                            │
      gather(likes)                 gather(dislikes)             gather(bookmarks)
            └──────────────┬───────────────┴────────────────────────────┘
                           ▼
              liked_ids / disliked_ids / bookmarked_ids
                           ▼
              [T1', T2', T3']  (same order, same length)

    All 3 x N tasks are created before the first barrier is awaited, so
    total latency tracks the slowest lookup, not N times the average one.

Failure policy:
    All-or-nothing. If any lookup raises, every outstanding lookup is
    cancelled and a single AnnotationError naming the failed relation is
    raised. A failed lookup is never read as "record absent".
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Set, Union

from tuiter.exceptions import AnnotationError
from tuiter.schemas.tuit import TuitResponse

logger = logging.getLogger(__name__)

ViewerId = Union[uuid.UUID, str]


class PairLookup(Protocol):
    """The one store capability the annotator needs."""

    async def find_by_pair(self, user_id: Any, tuit_id: Any) -> Optional[Any]:
        ...


_NO_FLAGS: Dict[str, bool] = {
    "liked_by_me": False,
    "disliked_by_me": False,
    "bookmarked_by_me": False,
    "owned_by_me": False,
}


class TuitAnnotator:
    """
    Viewer-relative decoration of tuits.

    Stateless apart from the three store handles it was built with;
    one instance is shared by all requests.
    """

    def __init__(self, likes: PairLookup, dislikes: PairLookup, bookmarks: PairLookup):
        self._relations = (
            ("likes", likes),
            ("dislikes", dislikes),
            ("bookmarks", bookmarks),
        )

    async def annotate(
        self,
        viewer_id: Optional[ViewerId],
        tuits: Iterable[TuitResponse],
    ) -> List[TuitResponse]:
        """
        Return one decorated copy per input tuit, in input order.

        Args:
            viewer_id: The user the flags are computed for. None means an
                       anonymous viewer: no lookups are issued and every
                       flag is False.
            tuits:     Tuit snapshots. Tuits without an author are kept and
                       get ``owned_by_me = False``.

        Raises:
            AnnotationError: a like, dislike or bookmark lookup failed.
        """
        tuits = list(tuits)
        if viewer_id is None or not tuits:
            return [t.model_copy(update=_NO_FLAGS) for t in tuits]

        hits = await self._fan_out(viewer_id, tuits)
        viewer = str(viewer_id)

        return [
            t.model_copy(
                update={
                    "liked_by_me": str(t.id) in hits["likes"],
                    "disliked_by_me": str(t.id) in hits["dislikes"],
                    "bookmarked_by_me": str(t.id) in hits["bookmarks"],
                    "owned_by_me": t.posted_by is not None and str(t.posted_by.id) == viewer,
                }
            )
            for t in tuits
        ]

    async def _fan_out(
        self, viewer_id: ViewerId, tuits: Sequence[TuitResponse]
    ) -> Dict[str, Set[str]]:
        """Run every lookup concurrently; map relation name → hit tuit ids."""
        tasks = {
            relation: [
                asyncio.create_task(store.find_by_pair(viewer_id, t.id)) for t in tuits
            ]
            for relation, store in self._relations
        }

        hits: Dict[str, Set[str]] = {}
        try:
            for relation, pending in tasks.items():
                try:
                    records = await asyncio.gather(*pending)
                except Exception as exc:
                    logger.error(
                        "Annotation lookup failed for %s (viewer=%s, tuits=%d): %s",
                        relation, viewer_id, len(tuits), str(exc),
                    )
                    raise AnnotationError(
                        relation,
                        context={
                            "viewer_id": str(viewer_id),
                            "tuit_count": len(tuits),
                            "original_error": type(exc).__name__,
                        },
                    ) from exc
                hits[relation] = {str(r.tuit_id) for r in records if r is not None}
        except BaseException:
            outstanding = [task for group in tasks.values() for task in group]
            for task in outstanding:
                task.cancel()
            # Drain so no task exception goes unretrieved
            await asyncio.gather(*outstanding, return_exceptions=True)
            raise

        logger.debug(
            "Annotated %d tuits for %s: %d liked, %d disliked, %d bookmarked",
            len(tuits), viewer_id,
            len(hits["likes"]), len(hits["dislikes"]), len(hits["bookmarks"]),
        )
        return hits
