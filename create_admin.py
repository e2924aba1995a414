"""
Create the first admin account.

Usage:
    python create_admin.py --email admin@example.com --password secret123

Credentials fall back to ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME from the
environment (or .env). Nothing is changed if the email is already registered.
"""
import argparse
import asyncio
import logging
import os
import sys

from app.crud import crud_user
from app.core.security import hash_password
from app.db.database import close_mongo_connection, connect_to_mongo
from app.schemas.user import User

logger = logging.getLogger("create_admin")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create an admin user for the Portfolio API")
    parser.add_argument("--name", default=os.getenv("ADMIN_NAME", "Admin User"))
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))
    args = parser.parse_args(argv)
    if not args.email or not args.password:
        parser.error("an email and password are required (flags or ADMIN_EMAIL / ADMIN_PASSWORD)")
    if len(args.password) < 6:
        parser.error("password must be at least 6 characters long")
    args.email = args.email.strip().lower()
    return args


async def create_admin(name: str, email: str, password: str) -> bool:
    """True when a new admin was inserted, False when the email was taken."""
    existing = await crud_user.get_user_by_email(email)
    if existing is not None:
        logger.warning("User %s already exists (role: %s)", email, existing.role)
        return False

    admin = User(
        name=name,
        email=email,
        password=hash_password(password),
        role="admin",
        bio="System Administrator",
    )
    await admin.insert()
    logger.info("Admin user %s created", email)
    return True


async def main(argv=None) -> int:
    args = parse_args(argv)
    if not await connect_to_mongo():
        return 1
    try:
        await create_admin(args.name, args.email, args.password)
    finally:
        await close_mongo_connection()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(asyncio.run(main()))
