#!/usr/bin/env python
"""Script to run the Taskboard persistence service."""
import logging

import uvicorn

from taskboard.config import PORT

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "taskboard.main:app",
        host="0.0.0.0",
        port=PORT,
        reload=False,
    )
