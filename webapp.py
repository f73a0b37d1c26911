from __future__ import annotations

import os
from fastapi import FastAPI
from hub.api_nodes import router as nodes_router
from spell_nodes.config import get_settings, setup_logging


settings = get_settings()
setup_logging(settings.log_level)

app = FastAPI(title="Spell Nodes")
app.include_router(nodes_router)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("webapp:app", host="127.0.0.1", port=int(os.getenv("WEB_PORT", "8000")))
