"""
govchain_node/app.py
--------------------
Thin entrypoint for running the GovChain FastAPI app via:

    uvicorn govchain_node.app:app

All real route wiring lives in govchain_node.govchain_api.
"""

from .govchain_api import create_app

app = create_app()


if __name__ == "__main__":
    # Convenience for: python -m govchain_node.app
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
