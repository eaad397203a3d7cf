#!/usr/bin/env python3
"""
Reading Study Server: entrypoint for uvicorn study_server.server:app.

For uvicorn study_server:app use study_server/__init__.py (exposes app from study_server.app).
"""

from .app import app

if __name__ == "__main__":
    import uvicorn

    from .config import get_config

    config = get_config()
    uvicorn.run(app, host=config.host, port=config.port)
