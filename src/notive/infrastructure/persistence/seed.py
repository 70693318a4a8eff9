"""Demo account seeding for local development."""

import logging

from notive.application.services.password_hasher import PasswordHasher
from notive.infrastructure.persistence.database import Database
from notive.infrastructure.persistence.repositories import UserRepository

logger = logging.getLogger(__name__)

DEMO_USERS: tuple[tuple[str, str, str], ...] = (
    ("test1", "test1@example.com", "123456"),
    ("test2", "test2@example.com", "123456"),
)


async def seed_demo_users(db: Database, hasher: PasswordHasher) -> int:
    """Ensure the demo accounts exist.

    Existing accounts are left untouched (their password is NOT reset).

    Returns:
        Number of accounts created
    """
    created = 0
    async with db.session_scope() as session:
        users = UserRepository(session)
        for name, email, password in DEMO_USERS:
            if await users.email_taken(email):
                continue
            await users.add(name=name, email=email, password_hash=await hasher.hash(password))
            created += 1

    logger.info(
        "Demo users ensured: %s (password: 123456)",
        ", ".join(email for _, email, _ in DEMO_USERS),
    )
    return created
