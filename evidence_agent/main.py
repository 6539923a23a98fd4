# Run from project root: uvicorn evidence_agent.main:app --reload

import logging

from fastapi import FastAPI

from evidence_agent.api.routes import router
from evidence_agent.mcp.server import mcp_router

logging.basicConfig(level=logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)


app = FastAPI(title="Multi-source Evidence Agent")
app.include_router(router)
app.include_router(mcp_router, prefix="/mcp")


if __name__ == "__main__":
    print("Evidence agent booting...")
