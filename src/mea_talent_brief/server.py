"""FastAPI service exposing the stateless parts of the newsletter workflow.

No session is kept server-side: clients hold candidates and selection, and a
published newsletter lives entirely in its share link.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from . import link_codec
from .config import get_settings
from .content_client import ContentClient
from .errors import DiscoveryError, InvalidLinkError, SynthesisError
from .models import CandidateItem, Document
from .selection import SelectionSet

app = FastAPI(title="MEA Talent Intelligence")


def _add_cors(app: FastAPI) -> None:
    """Allow a browser front end to call the API during local development."""
    allow_all = os.getenv("CORS_ALLOW_ALL", "true").lower() == "true"
    origins_env = os.getenv("CORS_ALLOW_ORIGINS", "")
    origins = [o.strip() for o in origins_env.split(",") if o.strip()]
    allow_credentials = os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"
    if allow_all or not origins:
        origins = ["*"]
    if origins == ["*"] and allow_credentials:
        # Starlette/FastAPI disallow wildcard origins when credentials are enabled.
        allow_credentials = False
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


_add_cors(app)


def _content_client() -> ContentClient:
    return ContentClient()


def _share_payload(document: Document) -> Dict[str, str]:
    token = link_codec.encode(document)
    share_url = (
        link_codec.build_share_url(get_settings().share_base_url, document) if token else ""
    )
    return {"token": token, "share_url": share_url}


def _parse_candidates(raw: Any) -> List[CandidateItem]:
    if not isinstance(raw, list):
        raise ValueError("articles must be a list.")
    return [CandidateItem.model_validate(entry) for entry in raw]


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/discover")
async def discover() -> Dict[str, Any]:
    try:
        items = await _content_client().discover()
    except DiscoveryError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message
        ) from exc
    return {"articles": [item.model_dump(mode="json", by_alias=True) for item in items]}


@app.post("/synthesize")
async def synthesize(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Generate a newsletter from 7-10 curated articles.
    Returns the newsletter plus its share token and URL.
    """
    try:
        items = _parse_candidates(payload.get("articles"))
    except (ValueError, ValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    selection = SelectionSet()
    for item in items:
        selection.toggle(item.id)
    if len(selection) != len(items) or not selection.can_synthesize:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Select between {SelectionSet.MIN_SIZE} and {SelectionSet.MAX_SIZE} "
                f"distinct articles (got {len(items)})."
            ),
        )

    try:
        document = await _content_client().synthesize(items)
    except SynthesisError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message
        ) from exc
    return {"newsletter": document.to_wire(), **_share_payload(document)}


@app.post("/share")
def share(payload: Dict[str, Any]) -> Dict[str, str]:
    try:
        document = Document.from_wire(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return _share_payload(document)


@app.get("/view")
def view(view: str = "", data: str = "") -> Dict[str, Any]:
    """Decode a shared link's query parameters back into the newsletter."""
    if view != link_codec.VIEW_VALUE or not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Expected view=newsletter and a data token.",
        )
    document = link_codec.decode(data)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=InvalidLinkError().message
        )
    return document.to_wire()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mea_talent_brief.server:app",
        host=os.getenv("BRIEF_HOST", "0.0.0.0"),
        port=int(os.getenv("BRIEF_PORT", "8000")),
        reload=os.getenv("BRIEF_RELOAD", "false").lower() == "true",
    )
