"""
Tuiter Backend — Like / Dislike / Bookmark Route Handlers
===========================================================

What:  The same four endpoints for each user-to-tuit relation.
How:   ``build_relation_router(relation)`` returns one APIRouter per relation;
       main.py mounts one for "likes", "dislikes" and "bookmarks".

Route Inventory (shown for bookmarks):
    GET /api/users/{uid}/bookmarks         tuits the user bookmarked, decorated
                                           with the user as viewer
    GET /api/tuits/{tid}/bookmarks         bookmark records for a tuit
    GET /api/bookmarks                     every bookmark record
    PUT /api/users/{uid}/bookmarks/{tid}   toggle the bookmark

Legacy status codes:
    The per-user listing answers any failure with 403 and the toggle answers
    any failure with 404. The actual failure kind is logged by
    collapsed_error().
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request

from tuiter.dependencies import get_annotator, get_stores
from tuiter.exceptions import NotFoundError, TuiterError
from tuiter.routes._responses import collapsed_error
from tuiter.schemas.common import ErrorResponse
from tuiter.schemas.join import JoinRecordResponse, ToggleResponse
from tuiter.schemas.tuit import TuitResponse
from tuiter.services.annotation import TuitAnnotator
from tuiter.services.auth import resolve_user_id
from tuiter.stores import Stores

logger = logging.getLogger(__name__)

RELATIONS = ("likes", "dislikes", "bookmarks")


def build_relation_router(relation: str) -> APIRouter:
    if relation not in RELATIONS:
        raise ValueError(f"Unknown relation '{relation}'. Must be one of: {RELATIONS}")

    router = APIRouter(prefix="/api", tags=[relation.capitalize()])

    @router.get(
        f"/users/{{uid}}/{relation}",
        response_model=List[TuitResponse],
        responses={403: {"description": "Not logged in or lookup failed", "model": ErrorResponse}},
        name=f"find_tuits_{relation}_by_user",
    )
    async def find_tuits_by_user(
        uid: str,
        request: Request,
        stores: Stores = Depends(get_stores),
        annotator: TuitAnnotator = Depends(get_annotator),
    ):
        try:
            user_id = resolve_user_id(uid, request)
            records = await stores.relation(relation).find_tuits_by_user(user_id)
            # Records whose tuit has since been deleted are skipped
            tuits = [TuitResponse.model_validate(r.tuit) for r in records if r.tuit is not None]
            return await annotator.annotate(user_id, tuits)
        except TuiterError as exc:
            return collapsed_error(exc, 403, f"GET /api/users/{uid}/{relation}")

    @router.get(
        f"/tuits/{{tid}}/{relation}",
        response_model=List[JoinRecordResponse],
        name=f"find_users_{relation}_tuit",
    )
    async def find_users_by_tuit(
        tid: uuid.UUID,
        stores: Stores = Depends(get_stores),
    ) -> List[JoinRecordResponse]:
        records = await stores.relation(relation).find_users_by_tuit(tid)
        return [JoinRecordResponse.model_validate(r) for r in records]

    @router.get(
        f"/{relation}",
        response_model=List[JoinRecordResponse],
        name=f"find_all_{relation}",
    )
    async def find_all(stores: Stores = Depends(get_stores)) -> List[JoinRecordResponse]:
        records = await stores.relation(relation).find_all()
        return [JoinRecordResponse.model_validate(r) for r in records]

    @router.put(
        f"/users/{{uid}}/{relation}/{{tid}}",
        response_model=ToggleResponse,
        responses={404: {"description": "User or tuit missing, or toggle failed", "model": ErrorResponse}},
        name=f"toggle_{relation}",
    )
    async def toggle(
        uid: str,
        tid: str,
        request: Request,
        stores: Stores = Depends(get_stores),
    ):
        try:
            user_id = resolve_user_id(uid, request)
            try:
                tuit_id = uuid.UUID(tid)
            except ValueError:
                raise NotFoundError(resource="tuit", resource_id=tid)
            if await stores.users.find_by_id(user_id) is None:
                raise NotFoundError(resource="user", resource_id=str(user_id))
            if await stores.tuits.find_by_id(tuit_id) is None:
                raise NotFoundError(resource="tuit", resource_id=str(tuit_id))

            state = await stores.relation(relation).toggle(user_id, tuit_id)
            return ToggleResponse(state=state)
        except TuiterError as exc:
            return collapsed_error(exc, 404, f"PUT /api/users/{uid}/{relation}/{tid}")

    return router
