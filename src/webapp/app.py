"""FastAPI приложение для мини-приложения кафе."""

from __future__ import annotations

import logging
import secrets
from typing import Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from cafe import catalog
from cafe.config import BACKEND, CURRENCY, setup_logging
from cafe.controller import CafeApp
from cafe.errors import CafeError, IdentityError, NotFoundError
from cafe.loyalty import reward_progress, stars_earned
from cafe.models import ASAP, CheckoutDetails, ContactInfo, Customization, PaymentMethod, Size
from cafe.router import ORDER_TAB, navigate
from cafe.session import OrderSession, OrderStage
from cafe.tracking import tracking_summary
from database import LocalIdentityProvider, SqliteStore
from docstore import RemoteDocumentStore


logger = logging.getLogger(__name__)

app = FastAPI(title="Birdies Cafe - Mini App")

# Учётные записи всегда локальные, профили и заказы — по CAFE_BACKEND
local_store: Optional[SqliteStore] = None
document_store = None

# Токен клиента -> контроллер его сессии
sessions: Dict[str, CafeApp] = {}


@app.on_event("startup")
async def startup():
    """Инициализация при запуске."""
    global local_store, document_store
    setup_logging()
    if local_store is None:
        local_store = SqliteStore()
    await local_store.init_db()
    if document_store is None:
        document_store = RemoteDocumentStore.from_env() if BACKEND == "remote" else local_store
    logger.info("Хранилище профилей: %s", type(document_store).__name__)


@app.exception_handler(CafeError)
async def cafe_error_handler(request: Request, exc: CafeError):
    body = {"error": str(exc)}
    if isinstance(exc, IdentityError):
        body["code"] = exc.code
    return JSONResponse(body, status_code=exc.status_code)


def _new_client() -> CafeApp:
    return CafeApp(LocalIdentityProvider(local_store), document_store, document_store)


def _bearer(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise IdentityError("not_signed_in")
    return authorization[len("Bearer "):]


def get_client(authorization: Optional[str] = Header(None)) -> CafeApp:
    client = sessions.get(_bearer(authorization))
    if client is None:
        raise IdentityError("not_signed_in")
    return client


def get_session(client: CafeApp = Depends(get_client)) -> OrderSession:
    return client.require_session()


# Представления


def profile_view(session: OrderSession) -> dict:
    profile = session.profile
    return {
        "uid": profile.uid,
        "email": profile.email,
        "name": profile.name,
        "hasCompletedOnboarding": profile.has_completed_onboarding,
        "preferences": profile.preferences.to_dict(),
        "preferredLocation": profile.preferred_location.to_dict() if profile.preferred_location else None,
        "selectedLocation": session.selected_location.to_dict() if session.selected_location else None,
        "favorites": list(profile.favorites),
        "stars": profile.stars,
    }


def cart_view(session: OrderSession) -> dict:
    cart = session.cart
    return {
        "lines": [line.to_dict() for line in cart.lines],
        "itemCount": cart.item_count,
        "subtotal": float(cart.subtotal()),
        "tax": float(cart.tax()),
        "total": float(cart.total()),
        "currency": CURRENCY,
    }


# Запросы


class SignUpRequest(BaseModel):
    email: str
    password: str
    confirm_password: str
    name: str = ""


class SignInRequest(BaseModel):
    email: str
    password: str


class OnboardingRequest(BaseModel):
    milk: str = ""
    diet: str = ""
    allergies: List[str] = Field(default_factory=list)


class LocationRequest(BaseModel):
    location_id: str
    preferred: bool = False


class AddToCartRequest(BaseModel):
    item_id: int
    size: Optional[Size] = None
    milk: Optional[str] = None
    instructions: str = ""
    quantity: int = Field(1, ge=1)


class QuantityRequest(BaseModel):
    quantity: int


class PlaceOrderRequest(BaseModel):
    name: str = ""
    phone: str = ""
    pickup_time: Literal["asap", "scheduled"] = "asap"
    scheduled_time: str = ""
    payment_method: PaymentMethod = PaymentMethod.CARD


# Общие эндпоинты


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/locations")
async def get_locations():
    return {"success": True, "data": [location.to_dict() for location in catalog.LOCATIONS]}


@app.get("/api/menu")
async def get_menu(category: str = "all", q: str = ""):
    """Меню с фильтром по категории и поиском по названию."""
    items = catalog.filter_menu(category, q)
    return {
        "success": True,
        "data": {
            "categories": [{"id": cat_id, "label": label} for cat_id, label in catalog.CATEGORIES],
            "items": [item.to_dict() for item in items],
        },
    }


@app.get("/api/featured")
async def get_featured():
    return {"success": True, "data": [item.to_dict() for item in catalog.FEATURED_ITEMS]}


@app.get("/api/events")
async def get_events():
    return {"success": True, "data": catalog.EVENTS}


# Учётная запись


def _evict(uid: str) -> None:
    """У пользователя одна активная сессия: прежние токены перестают действовать."""
    for token, client in list(sessions.items()):
        user = client.user
        if user is not None and user.uid == uid:
            del sessions[token]
            client.close()
            logger.info("Сессия %s заменена новым входом", uid)


async def _open(action) -> dict:
    client = _new_client()
    try:
        session = await action(client)
    except Exception:
        client.close()
        raise
    _evict(session.uid)
    token = secrets.token_urlsafe(24)
    sessions[token] = client
    return {
        "success": True,
        "token": token,
        "screen": client.screen().value,
        "profile": profile_view(session),
    }


@app.post("/api/auth/signup")
async def sign_up(payload: SignUpRequest):
    return await _open(
        lambda client: client.sign_up(payload.email, payload.password, payload.confirm_password, payload.name)
    )


@app.post("/api/auth/signin")
async def sign_in(payload: SignInRequest):
    return await _open(lambda client: client.sign_in(payload.email, payload.password))


@app.post("/api/auth/signout")
async def sign_out(authorization: Optional[str] = Header(None)):
    token = _bearer(authorization)
    client = sessions.pop(token, None)
    if client is not None:
        await client.sign_out()
        client.close()
    return {"success": True}


@app.get("/api/screen")
async def get_screen(request: Optional[str] = None, authorization: Optional[str] = Header(None)):
    """Экран для показа клиенту с учётом входа, онбординга и выбранной точки."""
    client = sessions.get(authorization[len("Bearer "):]) if authorization else None
    if client is None:
        return {"screen": "login"}
    if request == ORDER_TAB:
        session = client.require_session()
        request = navigate(request, session.selected_location is not None).value
    return {"screen": client.screen(request).value}


# Профиль


@app.get("/api/profile")
async def get_profile(session: OrderSession = Depends(get_session)):
    return {"success": True, "data": profile_view(session)}


@app.post("/api/onboarding")
async def complete_onboarding(payload: OnboardingRequest, client: CafeApp = Depends(get_client)):
    await client.complete_onboarding(payload.milk, payload.diet, payload.allergies)
    session = client.require_session()
    return {"success": True, "synced": session.last_sync_ok, "data": profile_view(session)}


@app.post("/api/location")
async def choose_location(payload: LocationRequest, session: OrderSession = Depends(get_session)):
    location = catalog.get_location(payload.location_id)
    if payload.preferred:
        await session.set_preferred_location(location)
    else:
        await session.select_location(location)
    return {"success": True, "synced": session.last_sync_ok, "data": profile_view(session)}


@app.post("/api/favorites/{item_id}")
async def toggle_favorite(item_id: int, session: OrderSession = Depends(get_session)):
    is_favorite = await session.toggle_favorite(item_id)
    return {
        "success": True,
        "synced": session.last_sync_ok,
        "favorite": is_favorite,
        "favorites": list(session.profile.favorites),
    }


@app.get("/api/favorites")
async def list_favorites(session: OrderSession = Depends(get_session)):
    items = catalog.favorite_items(session.profile.favorites)
    return {"success": True, "data": [item.to_dict() for item in items]}


# Корзина


@app.get("/api/cart")
async def get_cart(session: OrderSession = Depends(get_session)):
    return {"success": True, "data": cart_view(session)}


@app.post("/api/cart")
async def add_to_cart(payload: AddToCartRequest, session: OrderSession = Depends(get_session)):
    item = catalog.get_item(payload.item_id)
    default = session.default_customization(item)
    # Для позиций без размера сессия сама сбросит размер и молоко
    customization = Customization(
        size=payload.size or Size.REGULAR,
        milk=payload.milk or default.milk,
        instructions=payload.instructions,
    )
    line = session.add_to_cart(item.id, customization, payload.quantity)
    return {"success": True, "line": line.to_dict(), "data": cart_view(session)}


@app.patch("/api/cart/{line_id}")
async def update_cart_line(line_id: str, payload: QuantityRequest, session: OrderSession = Depends(get_session)):
    if not session.update_quantity(line_id, payload.quantity):
        raise NotFoundError("Cart line not found")
    return {"success": True, "data": cart_view(session)}


@app.delete("/api/cart/{line_id}")
async def remove_cart_line(line_id: str, session: OrderSession = Depends(get_session)):
    if not session.remove_from_cart(line_id):
        raise NotFoundError("Cart line not found")
    return {"success": True, "data": cart_view(session)}


# Оформление


@app.post("/api/checkout")
async def begin_checkout(session: OrderSession = Depends(get_session)):
    """Перейти от корзины к оформлению."""
    session.review_cart()
    total = session.begin_checkout()
    return {
        "success": True,
        "total": float(total),
        "starsToEarn": stars_earned(total),
        "availableStars": session.profile.stars,
    }


@app.post("/api/orders")
async def place_order(payload: PlaceOrderRequest, session: OrderSession = Depends(get_session)):
    if not session.cart.is_empty and session.stage != OrderStage.CHECKOUT:
        session.review_cart()
        session.begin_checkout()
    details = CheckoutDetails(
        contact=ContactInfo(payload.name, payload.phone),
        pickup_time=payload.scheduled_time if payload.pickup_time == "scheduled" else ASAP,
        payment_method=payload.payment_method,
    )
    order = await session.place_order(details)
    return {
        "success": True,
        "synced": session.last_sync_ok,
        "data": order.to_dict(),
        "stars": session.profile.stars,
    }


@app.get("/api/orders")
async def list_orders(session: OrderSession = Depends(get_session)):
    return {"success": True, "data": await session.order_history()}


@app.get("/api/orders/current")
async def current_order(session: OrderSession = Depends(get_session)):
    if session.current_order is None:
        raise NotFoundError("No active order")
    return {"success": True, "data": tracking_summary(session.current_order)}


@app.post("/api/orders/current/acknowledge")
async def acknowledge_order(session: OrderSession = Depends(get_session)):
    session.acknowledge_order()
    return {"success": True, "stage": session.stage.value}


@app.get("/api/stars")
async def get_stars(session: OrderSession = Depends(get_session)):
    progress = reward_progress(session.profile.stars)
    return {
        "success": True,
        "data": {
            "stars": progress.stars,
            "towardNext": progress.toward_next,
            "remaining": progress.remaining,
            "percent": progress.percent,
        },
    }


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
