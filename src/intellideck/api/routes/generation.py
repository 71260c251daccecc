"""
AI generation routes
Turns pasted or uploaded notes into flashcards
"""
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from intellideck.api.dependencies import Context
from intellideck.utils.notes_reader import read_notes

router = APIRouter(prefix="/api/generate", tags=["Generation"])


@router.post("/cards")
async def generate_cards(
    ctx: Context,
    notes: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    request_key: str = Form("create-set"),
):
    """
    Generate term/definition pairs from notes

    - **notes**: Pasted notes text
    - **file**: Alternatively, a .txt or .pdf file with the notes
    - **request_key**: Identifies the form; a second request with the same key is
      rejected while the first is still running
    """
    text = notes or ""
    if file is not None and not text.strip():
        try:
            text = read_notes(file.filename or "", await file.read())
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    async with ctx.guard.hold(f"cards:{request_key}"):
        cards = await ctx.generator.generate_cards(text)

    return {
        "cards": [c.model_dump() for c in cards],
        "count": len(cards),
    }
