#!/usr/bin/env python
"""Run the Taskflow API locally with auto-reload."""
import uvicorn

from taskflow.config import HOST, PORT

if __name__ == "__main__":
    uvicorn.run("taskflow.main:create_app", factory=True, host=HOST, port=PORT, reload=True)
