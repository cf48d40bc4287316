"""
Opsboard: User directory filtering, ordering and administration
"""
import re

from pydantic import BaseModel

from opsboard.api.sources import DataSource
from opsboard.core.exceptions import DomainValidationError
from opsboard.core.permissions import Action, require
from opsboard.core.session import Session
from opsboard.models.user import ROLE_PRIORITY, Role, UserAccount
from opsboard.schemas.envelope import Created
from opsboard.schemas.filters import ALL, UserFilter
from opsboard.services.optimistic import OptimisticCollection

# Deliberately loose: something@something.something
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.search(email))


def filter_users(users: list[UserAccount], flt: UserFilter | None = None) -> list[UserAccount]:
    flt = flt or UserFilter()
    needle = flt.search.strip().lower()
    out = users
    if flt.only_active:
        out = [u for u in out if u.active]
    if flt.role != ALL:
        out = [u for u in out if u.role == flt.role]
    if needle:
        out = [u for u in out if needle in (u.name or "").lower() or needle in u.email.lower()]
    return list(out)


def sort_users(users: list[UserAccount]) -> list[UserAccount]:
    """Role priority first (ADMIN, MANAGER, STAFF), then newest account first."""
    return sorted(users, key=lambda u: (ROLE_PRIORITY[u.role], -u.created_at.timestamp()))


class UserForm(BaseModel):
    name: str = ""
    email: str = ""
    role: Role = Role.STAFF


class UserDraft(BaseModel):
    name: str
    email: str
    role: Role


def validate_user_form(form: UserForm, existing: list[UserAccount]) -> UserDraft:
    name = form.name.strip()
    email = form.email.strip().lower()
    if not name:
        raise DomainValidationError("Name is required.", field="name")
    if not email:
        raise DomainValidationError("Email is required.", field="email")
    if not is_valid_email(email):
        raise DomainValidationError("Enter a valid email address.", field="email")
    if any(u.email.strip().lower() == email for u in existing):
        raise DomainValidationError("A user with that email already exists.", field="email")
    return UserDraft(name=name, email=email, role=form.role)


class UserDirectory:
    def __init__(self, source: DataSource[UserAccount], session: Session):
        self.session = session
        self.collection: OptimisticCollection[UserAccount] = OptimisticCollection(source)
        self.filter = UserFilter()

    @property
    def users(self) -> list[UserAccount]:
        return self.collection.items

    async def load(self) -> list[UserAccount]:
        require(self.session.role, Action.VIEW_USERS)
        return await self.collection.load()

    def view(self) -> list[UserAccount]:
        return sort_users(filter_users(self.users, self.filter))

    async def add(self, form: UserForm) -> Created[UserAccount]:
        """Server assigns the id, so the row appears only once it answers."""
        require(self.session.role, Action.CREATE_USER)
        draft = validate_user_form(form, self.users)
        created = await self.collection.source.create(draft.model_dump(mode="json"))
        self.collection.adopt(created.data)
        return created

    async def edit(self, user_id: str, name: str | None = None, role: Role | None = None) -> UserAccount:
        require(self.session.role, Action.EDIT_USER)
        user = self._get(user_id)
        changes: dict = {}
        if name is not None:
            if not name.strip():
                raise DomainValidationError("Name is required.", field="name")
            changes["name"] = name.strip()
        if role is not None:
            changes["role"] = Role(role)
        if not changes:
            return user

        payload = {key: (value.value if isinstance(value, Role) else value) for key, value in changes.items()}

        async def remote():
            return await self.collection.source.update(user_id, payload)

        return await self.collection.replace(user_id, user.model_copy(update=changes), remote)

    async def set_active(self, user_id: str, active: bool) -> UserAccount:
        user = self._get(user_id)
        require(self.session.role, Action.TOGGLE_USER, target_role=user.role)

        async def remote():
            return await self.collection.source.update(user_id, {"active": active})

        return await self.collection.replace(user_id, user.model_copy(update={"active": active}), remote)

    async def toggle_active(self, user_id: str) -> UserAccount:
        return await self.set_active(user_id, not self._get(user_id).active)

    async def remove(self, user_id: str) -> None:
        user = self._get(user_id)
        require(self.session.role, Action.REMOVE_USER, target_role=user.role)

        async def remote():
            await self.collection.source.delete(user_id)

        await self.collection.remove(user_id, remote)

    def _get(self, user_id: str) -> UserAccount:
        user = self.collection.get(user_id)
        if user is None:
            raise DomainValidationError("User no longer exists.")
        return user
