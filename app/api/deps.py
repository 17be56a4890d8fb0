from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from typing import Optional, Type, TypeVar

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import AuthenticationError
from ..schemas.auth import SessionUser
from ..services.booking_service import BookingService
from ..services.chatbot_service import ChatbotService
from ..services.notifications import NotificationService, build_notification_service
from ..services.session_store import SessionStore

ModelT = TypeVar("ModelT", bound=BaseModel)

def get_notifier(request: Request) -> NotificationService:
    """Notification service constructed at startup."""
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        notifier = build_notification_service(settings)
        request.app.state.notifier = notifier
    return notifier

def get_booking_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> BookingService:
    return BookingService(db, notifier, settings)

def get_chatbot() -> ChatbotService:
    return ChatbotService(settings.CONSULTATION_PRICES, settings.CURRENCY)

def get_session_store(redis_client = Depends(get_redis)) -> SessionStore:
    return SessionStore(redis_client, settings.SESSION_EXPIRE_SECONDS)

def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)

async def get_current_session(
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionUser]:
    """Identity of the caller if they hold a live session, None otherwise."""
    return store.get(token)

async def require_session(
    current: Optional[SessionUser] = Depends(get_current_session),
) -> SessionUser:
    if current is None:
        raise AuthenticationError("Please log in to continue")
    return current

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

def is_form_post(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.startswith(FORM_CONTENT_TYPES)

async def read_payload(request: Request, model: Type[ModelT]) -> ModelT:
    """Parse a JSON or HTML form body into ``model``."""
    if is_form_post(request):
        data = dict(await request.form())
    else:
        try:
            data = await request.json()
        except ValueError:
            data = {}

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors(include_url=False)]
        )
