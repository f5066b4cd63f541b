from fastapi import FastAPI
from pathlib import Path
import json
import os

app = FastAPI(title="Mock IP Reputation Server", version="1.0.0")
# Support both local development and Docker
DATA_FILE = (
    Path("/ip_stub/reputation.json")
    if os.path.exists("/ip_stub/reputation.json")
    else Path(__file__).resolve().parent / "reputation.json"
)

CLEAN = {"is_malicious": False, "is_proxy": False, "is_vpn": False, "is_tor": False, "categories": []}


def load_reputation() -> dict:
    return json.loads(DATA_FILE.read_text()) if DATA_FILE.exists() else {}


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/ip/{ip}")
def get_reputation(ip: str):
    return {**CLEAN, **load_reputation().get(ip, {})}
