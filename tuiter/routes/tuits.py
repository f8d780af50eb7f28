"""
Tuiter Backend — Tuit Route Handlers
======================================

What:  Tuit CRUD. Every read is decorated for the logged-in viewer by the
       TuitAnnotator (anonymous requests get all flags False).

Route Inventory:
    GET    /api/tuits                 all tuits, newest first
    GET    /api/tuits/{tid}           one tuit
    GET    /api/users/{uid}/tuits     tuits posted by a user
    POST   /api/users/{uid}/tuits     post a tuit as a user
    PUT    /api/tuits/{tid}           edit text / stats
    DELETE /api/tuits/{tid}           delete with its likes, dislikes, bookmarks
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request

from tuiter.dependencies import get_annotator, get_stores
from tuiter.exceptions import NotFoundError
from tuiter.schemas.common import ErrorResponse
from tuiter.schemas.tuit import TuitCreate, TuitResponse, TuitUpdate
from tuiter.schemas.user import DeleteResult
from tuiter.services.annotation import TuitAnnotator
from tuiter.services.auth import resolve_user_id, session_user_id
from tuiter.stores import Stores, delete_tuit_cascade

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Tuits"])

_NOT_FOUND = {404: {"description": "Tuit or user not found", "model": ErrorResponse}}


@router.get("/tuits", response_model=List[TuitResponse])
async def find_all_tuits(
    request: Request,
    stores: Stores = Depends(get_stores),
    annotator: TuitAnnotator = Depends(get_annotator),
) -> List[TuitResponse]:
    tuits = await stores.tuits.find_all()
    return await annotator.annotate(
        session_user_id(request),
        [TuitResponse.model_validate(t) for t in tuits],
    )


@router.get("/tuits/{tid}", response_model=TuitResponse, responses=_NOT_FOUND)
async def find_tuit_by_id(
    tid: uuid.UUID,
    request: Request,
    stores: Stores = Depends(get_stores),
    annotator: TuitAnnotator = Depends(get_annotator),
) -> TuitResponse:
    tuit = await stores.tuits.find_by_id(tid)
    if tuit is None:
        raise NotFoundError(resource="tuit", resource_id=str(tid))
    (decorated,) = await annotator.annotate(
        session_user_id(request), [TuitResponse.model_validate(tuit)]
    )
    return decorated


@router.get("/users/{uid}/tuits", response_model=List[TuitResponse])
async def find_tuits_by_user(
    uid: str,
    request: Request,
    stores: Stores = Depends(get_stores),
    annotator: TuitAnnotator = Depends(get_annotator),
) -> List[TuitResponse]:
    user_id = resolve_user_id(uid, request)
    tuits = await stores.tuits.find_by_user(user_id)
    return await annotator.annotate(
        session_user_id(request),
        [TuitResponse.model_validate(t) for t in tuits],
    )


@router.post("/users/{uid}/tuits", response_model=TuitResponse, responses=_NOT_FOUND)
async def create_tuit(
    uid: str,
    body: TuitCreate,
    request: Request,
    stores: Stores = Depends(get_stores),
) -> TuitResponse:
    user_id = resolve_user_id(uid, request)
    if await stores.users.find_by_id(user_id) is None:
        raise NotFoundError(resource="user", resource_id=str(user_id))

    tuit = await stores.tuits.create(user_id, body.model_dump(mode="python"))
    # A fresh tuit has no likes yet; only ownership can be true
    return TuitResponse.model_validate(tuit).model_copy(
        update={"owned_by_me": session_user_id(request) == user_id}
    )


@router.put("/tuits/{tid}", response_model=TuitResponse, responses=_NOT_FOUND)
async def update_tuit(
    tid: uuid.UUID,
    body: TuitUpdate,
    request: Request,
    stores: Stores = Depends(get_stores),
    annotator: TuitAnnotator = Depends(get_annotator),
) -> TuitResponse:
    changes = body.model_dump(mode="python", exclude_unset=True, exclude_none=True)
    tuit = await stores.tuits.update(tid, changes)
    if tuit is None:
        raise NotFoundError(resource="tuit", resource_id=str(tid))
    (decorated,) = await annotator.annotate(
        session_user_id(request), [TuitResponse.model_validate(tuit)]
    )
    return decorated


@router.delete("/tuits/{tid}", response_model=DeleteResult)
async def delete_tuit(
    tid: uuid.UUID,
    stores: Stores = Depends(get_stores),
) -> DeleteResult:
    deleted = await delete_tuit_cascade(stores, tid)
    logger.info("Tuit %s deleted (%d)", tid, deleted)
    return DeleteResult(deleted_count=deleted)
