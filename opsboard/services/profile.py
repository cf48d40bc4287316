"""
Opsboard: Profile editor

bootstrap() is the one place a remote failure is tolerated: the screen falls
back to the user stored in the session instead of blocking.
"""
import logging

from opsboard.core.exceptions import ApiError, DomainValidationError
from opsboard.core.session import Session
from opsboard.schemas.auth import SessionUser
from opsboard.services.users import is_valid_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def validate_profile(name: str, email: str) -> tuple[str, str]:
    name, email = (name or "").strip(), (email or "").strip().lower()
    if not name:
        raise DomainValidationError("Name is required.", field="name")
    if not email:
        raise DomainValidationError("Email is required.", field="email")
    if not is_valid_email(email):
        raise DomainValidationError("Enter a valid email address.", field="email")
    return name, email


def validate_password_change(current: str, new: str, confirm: str) -> None:
    if not current:
        raise DomainValidationError("Enter your current password.", field="current_password")
    if len(new or "") < MIN_PASSWORD_LENGTH:
        raise DomainValidationError(
            f"New password must be at least {MIN_PASSWORD_LENGTH} characters.", field="new_password"
        )
    if new != confirm:
        raise DomainValidationError("New passwords do not match.", field="confirm_password")


class ProfileService:
    def __init__(self, adapter, session: Session):
        self.adapter = adapter
        self.session = session

    async def bootstrap(self) -> SessionUser | None:
        try:
            me = await self.adapter.me()
        except ApiError as exc:
            logger.warning("Profile refresh failed, using stored session user: %s", exc.message)
            return self.session.user
        await self.session.set_user(me)
        return me

    def is_dirty(self, name: str, email: str) -> bool:
        user = self.session.user
        if user is None:
            return False
        return (name or "").strip() != user.name or (email or "").strip().lower() != user.email

    async def save_profile(self, name: str, email: str) -> SessionUser:
        user = self.session.user
        if user is None:
            raise ApiError("Not signed in.", status_code=401)
        name, email = validate_profile(name, email)
        if not self.is_dirty(name, email):
            return user

        updated = await self.adapter.update_me(name, email)
        merged = user.model_copy(update={"name": updated.name or name, "email": updated.email or email})
        await self.session.set_user(merged)
        return merged

    async def change_password(self, current: str, new: str, confirm: str) -> None:
        validate_password_change(current, new, confirm)
        await self.adapter.change_password(current, new)
