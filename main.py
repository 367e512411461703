"""Simple entrypoint to run the EcoWardrobe API locally."""

import os

import uvicorn

from server.api import create_app
from wardrobe_app.app import WardrobeApp


def main() -> None:
    app = create_app(WardrobeApp())
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8080")))


if __name__ == "__main__":
    main()
