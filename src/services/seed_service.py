"""Demo data for local development (SEED_DEMO_DATA=true)."""

import logging

from domain.model.user import Phone, User
from port.user_repository import UserRepository
from services.password import hash_password

logger = logging.getLogger(__name__)

# (name, email, password, active, [(number, city_code, country_code), ...])
DEMO_USERS = [
    ("Juan Pérez", "juan@email.com", "Juan!2024a", True, [("123456789", "1", "57"), ("987654321", "2", "57")]),
    ("María García", "maria@email.com", "Maria!2024a", True, [("555555555", "1", "57")]),
    ("Carlos López", "carlos@email.com", "Carlos!2024a", True, []),
    ("Ana Martínez", "ana@email.com", "Ana!2024abc", False, [("111111111", "1", "57"), ("222222222", "2", "57"), ("333333333", "3", "57")]),
    ("Pedro Sánchez", "pedro@email.com", "Pedro!2024a", True, [("444444444", "1", "57")]),
]


def seed_demo_users(repo: UserRepository) -> int:
    """Insert the demo users into an empty store. Return how many were added."""
    if repo.find_all():
        logger.info("User store not empty, skipping demo seed")
        return 0

    created = 0
    for name, email, password, active, phones in DEMO_USERS:
        user = User.create(
            name=name,
            email=email,
            password_hash=hash_password(password),
            active=active,
            phones=[Phone(number=n, city_code=c, country_code=cc) for n, c, cc in phones],
        )
        if repo.save(user):
            created += 1

    logger.info("Seeded demo users", extra={"count": created})
    return created
