"""
aiohttp application serving a SheetLogStore over GET query parameters.

Stands in for the deployed spreadsheet script during development and tests.
"""
from __future__ import annotations

import logging

from aiohttp import web

from .sheet_store import SheetLogStore

_LOGGER = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", SheetLogStore)


async def handle_get(request: web.Request) -> web.Response:
    store = request.app[STORE_KEY]
    body = store.handle(request.query)
    response = web.json_response(body)
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


def create_app(store: SheetLogStore | None = None) -> web.Application:
    app = web.Application()
    app[STORE_KEY] = store or SheetLogStore()
    app[STORE_KEY].setup_sheets()
    app.router.add_get("/", handle_get)
    return app


def run_server(store: SheetLogStore, host: str = "127.0.0.1", port: int = 8765) -> None:
    _LOGGER.info("Serving log store on http://%s:%s/", host, port)
    web.run_app(create_app(store), host=host, port=port, print=None)
