from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import hash_password, verify_password
from app.core.errors import validation_error
from app.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession, bcrypt_rounds: int = 10):
        self.session = session
        self.bcrypt_rounds = bcrypt_rounds

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        res = await self.session.execute(stmt)
        return res.scalars().first()

    async def register(self, name: str, email: str, password: str) -> User:
        if await self.get_user_by_email(email):
            raise validation_error("User already exists")

        user = User(
            name=name.strip(),
            email=email.strip().lower(),
            password_hash=hash_password(password, self.bcrypt_rounds),
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        logger.info(f"User registered: {user.id}")
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        user = await self.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed: invalid email or password")
            return None
        return user
