from __future__ import annotations

import json
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from env import load_env

load_env()

from bitmap import decode_upload  # noqa: E402
from errors import CompositeFailure, UploadRejected  # noqa: E402
from models import ContentVariant, RenderParameters, parse_hex_color  # noqa: E402
from profile_ring import FrameEditor  # noqa: E402

app = FastAPI(title="Profile Ring")


class RenderParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    font_size_multiplier: float = Field(40, gt=0)
    text_color: str = "#ffffff"
    ring_color: str = "#2547A9"
    ring_opacity_pct: int = Field(94, ge=0, le=100)
    overlay_mode: bool = False
    caption_enabled: bool = True
    caption_color: str = "#ffffff"
    caption_font_size_px: int = Field(24, gt=0)
    caption_angle_deg: int = Field(270, ge=0, le=359)
    caption_centered: bool = False
    content_variant: ContentVariant = ContentVariant.PRIMARY

    @field_validator("text_color", "ring_color", "caption_color")
    @classmethod
    def _hex_color(cls, v: str) -> str:
        parse_hex_color(v)
        return v if v.startswith("#") else f"#{v}"


@app.get("/defaults")
def defaults() -> dict[str, Any]:
    return RenderParameters().as_dict()


@app.post("/render")
def render_photo(
    file: UploadFile = File(...),
    params: str | None = Form(None),
):
    # plain def: FastAPI runs the decode and skia work in its threadpool
    data = file.file.read()
    try:
        bitmap = decode_upload(data, file.content_type)
    except UploadRejected as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        body = RenderParams.model_validate_json(params or "{}")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=json.loads(e.json()))

    editor = FrameEditor(log=print)
    editor.load(bitmap)
    changes = body.model_dump(exclude_unset=True)
    if changes:
        editor.update(**changes)

    try:
        result = editor.export()
    except CompositeFailure as e:
        print(f"ERROR: export failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate image. Please try again.")

    print(f"Rendered {result.filename} ({len(result.data)} bytes)")
    return Response(
        content=result.data,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
