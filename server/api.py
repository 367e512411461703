"""FastAPI server exposing the wardrobe endpoints for deployment."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.encoders import jsonable_encoder

from logic.validation import (
    AnalyzeClothingRequest,
    OutfitCreate,
    OutfitUpdate,
    WardrobeItemCreate,
    WardrobeItemUpdate,
    WeatherPreferenceInput,
    validation_errors,
)
from models.user import User
from wardrobe_app.app import WardrobeApp
from wardrobe_app.errors import AuthenticationError, WardrobeAppError
from wardrobe_app.logging_config import correlation_context, get_logger, log_event

LOGGER = get_logger(__name__)

USER_HEADER = "X-User-Id"
CORRELATION_HEADER = "X-Correlation-Id"


def _error_body(error_code: str, message: str, details: Any = None) -> Dict[str, Any]:
    return {"success": False, "error_code": error_code, "message": message, "details": details or {}}


def _to_json(record: Any) -> Any:
    if isinstance(record, list):
        return [_to_json(entry) for entry in record]
    if record is None:
        return None
    return jsonable_encoder(asdict(record))


def create_app(wardrobe_app: WardrobeApp | None = None) -> FastAPI:
    """Build the FastAPI application around one :class:`WardrobeApp`."""

    wardrobe = wardrobe_app or WardrobeApp()
    app = FastAPI(title="EcoWardrobe", version="0.1.0")
    app.state.wardrobe = wardrobe

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        with correlation_context(request.headers.get(CORRELATION_HEADER)) as correlation_id:
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

    @app.exception_handler(WardrobeAppError)
    async def handle_app_error(request: Request, exc: WardrobeAppError) -> JSONResponse:
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        log_event(
            LOGGER,
            level,
            "request_failed",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error_code=exc.error_code,
            error=exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(_error_body(exc.error_code, exc.message, exc.details)),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = validation_errors(exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("VALIDATION_ERROR", "Invalid request payload", {"errors": errors}),
        )

    def current_user(x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER)) -> User:
        if not x_user_id:
            raise AuthenticationError()
        return wardrobe.authenticate(x_user_id)

    @app.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "eco-wardrobe",
            "environment": wardrobe.config.environment or "local",
            "model": wardrobe.config.model,
        }

    @app.get("/api/users/me")
    def me(user: User = Depends(current_user)) -> dict:
        return user.public_view()

    @app.get("/api/wardrobe")
    def list_wardrobe(user: User = Depends(current_user)) -> List[dict]:
        return _to_json(wardrobe.list_wardrobe(user.id))

    @app.post("/api/wardrobe", status_code=status.HTTP_201_CREATED)
    def create_wardrobe_item(payload: WardrobeItemCreate, user: User = Depends(current_user)) -> dict:
        return _to_json(wardrobe.create_wardrobe_item(user.id, payload))

    @app.get("/api/wardrobe/{item_id}")
    def get_wardrobe_item(item_id: int, user: User = Depends(current_user)) -> dict:
        return _to_json(wardrobe.get_wardrobe_item(user.id, item_id))

    @app.patch("/api/wardrobe/{item_id}")
    def update_wardrobe_item(
        item_id: int, payload: WardrobeItemUpdate, user: User = Depends(current_user)
    ) -> dict:
        return _to_json(wardrobe.update_wardrobe_item(user.id, item_id, payload))

    @app.delete("/api/wardrobe/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_wardrobe_item(item_id: int, user: User = Depends(current_user)) -> Response:
        wardrobe.delete_wardrobe_item(user.id, item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/api/outfits")
    def list_outfits(user: User = Depends(current_user)) -> List[dict]:
        return _to_json(wardrobe.list_outfits(user.id))

    @app.post("/api/outfits", status_code=status.HTTP_201_CREATED)
    def create_outfit(payload: OutfitCreate, user: User = Depends(current_user)) -> dict:
        return _to_json(wardrobe.create_outfit(user.id, payload))

    @app.get("/api/outfits/{outfit_id}")
    def get_outfit(outfit_id: int, user: User = Depends(current_user)) -> dict:
        return _to_json(wardrobe.get_outfit(user.id, outfit_id))

    @app.patch("/api/outfits/{outfit_id}")
    def update_outfit(outfit_id: int, payload: OutfitUpdate, user: User = Depends(current_user)) -> dict:
        return _to_json(wardrobe.update_outfit(user.id, outfit_id, payload))

    @app.delete("/api/outfits/{outfit_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_outfit(outfit_id: int, user: User = Depends(current_user)) -> Response:
        wardrobe.delete_outfit(user.id, outfit_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/api/recommendations")
    def recommendations(occasion: Optional[str] = None, user: User = Depends(current_user)) -> List[dict]:
        return _to_json(wardrobe.get_recommendations(user.id, occasion))

    @app.get("/api/weather-preferences")
    def get_weather_preferences(user: User = Depends(current_user)) -> Optional[dict]:
        return _to_json(wardrobe.get_weather_preference(user.id))

    @app.post("/api/weather-preferences")
    def set_weather_preferences(
        payload: WeatherPreferenceInput, user: User = Depends(current_user)
    ) -> dict:
        return _to_json(wardrobe.set_weather_preference(user.id, payload))

    @app.get("/api/weather")
    def weather(location: Optional[str] = None, user: User = Depends(current_user)) -> dict:
        return _to_json(wardrobe.get_weather(location, user_id=user.id))

    @app.get("/api/forecast")
    def forecast(location: Optional[str] = None, user: User = Depends(current_user)) -> List[dict]:
        return _to_json(wardrobe.get_forecast(location, user_id=user.id))

    @app.post("/api/analyze-clothing")
    def analyze_clothing(payload: AnalyzeClothingRequest, user: User = Depends(current_user)) -> dict:
        return _to_json(wardrobe.analyze_clothing(payload.image_data))

    @app.get("/api/sustainability/material")
    def material_sustainability(name: str = "", user: User = Depends(current_user)) -> dict:
        return _to_json(wardrobe.analyze_material(name))

    return app


def get_app() -> FastAPI:
    """Expose a FastAPI instance configured from the environment for ASGI servers."""

    return create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=int(os.getenv("PORT", "8080")), reload=False)


__all__ = ["create_app", "get_app"]
