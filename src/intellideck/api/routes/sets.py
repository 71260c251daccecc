"""
Study set routes
Handles the library: create, list, star toggling, export and import
"""
from typing import List

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import FileResponse
from loguru import logger

from intellideck.api.dependencies import Context
from intellideck.models.flashcard_models import CreateSetRequest
from intellideck.services.library_service import merge_generated
from intellideck.utils import set_storage

router = APIRouter(prefix="/api/sets", tags=["Study Sets"])


@router.get("")
async def list_sets(ctx: Context):
    """List every set in the library"""
    return [
        {
            "topic": s.topic,
            "card_count": len(s.cards),
            "starred_count": sum(1 for c in s.cards if c.is_starred),
        }
        for s in ctx.library.list_sets()
    ]


@router.post("", status_code=201)
async def create_set(request: CreateSetRequest, ctx: Context):
    """
    Create a set from the create-set form

    - **title**: Set title (required)
    - **cards**: Card rows; rows missing a term or definition are ignored
    - **generated**: Cards returned by /api/generate/cards, appended after the typed rows
    """
    drafts = request.cards
    if request.generated:
        drafts = merge_generated(drafts, request.generated)
    study_set = ctx.library.create_set(request.title, drafts)
    return study_set.model_dump(by_alias=True)


@router.post("/import")
async def import_sets(ctx: Context, files: List[UploadFile] = File(...)):
    """
    Load study sets from uploaded .json files

    Invalid files are skipped; topics already in the library are dropped.
    """
    documents = []
    for upload in files:
        documents.append((upload.filename or "", await upload.read()))

    loaded = set_storage.collect_sets(documents, existing_topics=ctx.library.topics)
    added = ctx.library.add_imported(loaded)
    logger.info(f"Imported {len(added)} of {len(files)} uploaded file(s)")
    return {
        "added": [s.topic for s in added],
        "skipped": len(files) - len(added),
    }


@router.get("/{topic}")
async def get_set(topic: str, ctx: Context):
    study_set = ctx.library.get(topic)
    return {
        **study_set.model_dump(by_alias=True),
        "starred_count": ctx.library.starred_count(topic),
    }


@router.post("/{topic}/cards/{card_id}/star")
async def toggle_star(topic: str, card_id: str, ctx: Context):
    """Flip a card's star; open flashcard sessions on the set see the change"""
    card = ctx.library.toggle_star(topic, card_id)
    ctx.sessions.refresh_cards(topic, ctx.library.get(topic).cards)
    return card.model_dump(by_alias=True)


@router.get("/{topic}/export")
async def export_set(topic: str, ctx: Context):
    """
    Save a set to the library folder and download it

    - **topic**: Set to export; the filename is derived from it
    """
    output_path = ctx.library.export(topic, ctx.library_dir)
    return FileResponse(
        path=str(output_path),
        filename=output_path.name,
        media_type="application/json"
    )
