from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.responses import PlainTextResponse

from . import rules
from .convert import convert
from .decode import decode_upload
from .logger import get_logger
from .models import (
    ConvertRequest,
    ConvertResult,
    HealthResponse,
    Session,
    SessionRequest,
    UploadResponse,
)
from .session import mode_for_filename, reduce

log = get_logger(__name__)

app = FastAPI(
    title="csv-json-converter",
    description="Convert tabular data between CSV and JSON",
    version="0.1.0",
)

_MEDIA_TYPES = {
    rules.CSV2JSON: "application/json",
    rules.JSON2CSV: "text/csv",
}


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/convert", response_model=ConvertResult)
def convert_text(req: ConvertRequest):
    return convert(req.mode, req.input, quoted=req.quoted)


@app.post("/upload", response_model=UploadResponse)
async def upload(file: UploadFile = File(...)):
    raw = await file.read()
    filename = file.filename or ""
    try:
        content, encoding = decode_upload(raw)
    except UnicodeDecodeError:
        log.warning("could not decode upload %r", filename)
        raise HTTPException(status_code=422, detail=rules.MSG_FILE_READ_FAILED)

    return {
        "filename": filename,
        "content": content,
        "mode": mode_for_filename(filename),
        "encoding": encoding,
    }


@app.post("/download")
def download(req: ConvertRequest):
    result = convert(req.mode, req.input, quoted=req.quoted)
    if not result.ok:
        raise HTTPException(status_code=422, detail=result.error.model_dump())

    return PlainTextResponse(
        result.output,
        media_type=_MEDIA_TYPES[req.mode],
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@app.post("/session", response_model=Session)
def session_event(req: SessionRequest):
    return reduce(req.session, req.event)
