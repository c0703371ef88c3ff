from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Aggregation Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path(os.environ.get("AGGREGATOR_STUB_DIR", Path(__file__).resolve().parent / "stub"))

COLLECTIONS = ("accounts", "goals", "transactions")


def _load(user_id: str) -> dict:
    file = DATA_DIR / f"{user_id}.json"
    if not file.exists():
        raise HTTPException(status_code=404, detail="user not found")
    return json.loads(file.read_text())


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/{collection}")
def get_collection(collection: str, user_id: str):
    if collection not in COLLECTIONS:
        raise HTTPException(status_code=404, detail="unknown collection")
    return JSONResponse(content={collection: _load(user_id).get(collection, [])})
