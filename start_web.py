#!/usr/bin/env python3
"""Start the actions maintainer web API."""

import os

import uvicorn

if __name__ == "__main__":
    host = os.environ.get("MAINTAINER_HOST", "127.0.0.1")
    port = int(os.environ.get("MAINTAINER_PORT", "8000"))

    print(f"Actions Maintainer API on http://{host}:{port} (docs at /docs)")
    if not os.environ.get("GITHUB_TOKEN"):
        print("GITHUB_TOKEN is not set, GitHub requests are anonymous and rate limited")

    uvicorn.run(
        "apps.web.main:app",
        host=host,
        port=port,
        reload=True,
        reload_dirs=["apps", "maintainer"],
    )
