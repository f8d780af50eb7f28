"""
Tuiter Backend — FastAPI Dependencies
=======================================

What:  Hands the process-wide store bundle and annotator to route handlers.
How:   Both objects are built once by create_app() and kept on ``app.state``;
       these dependencies read them from the current request's app.
"""

from fastapi import Request

from tuiter.services.annotation import TuitAnnotator
from tuiter.stores import Stores


def get_stores(request: Request) -> Stores:
    return request.app.state.stores


def get_annotator(request: Request) -> TuitAnnotator:
    return request.app.state.annotator
