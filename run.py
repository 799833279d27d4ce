#!/usr/bin/env python3
"""Run script for ponto."""

import uvicorn

from ponto.database.database import init_db

if __name__ == "__main__":
    init_db()
    uvicorn.run(
        "ponto.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
