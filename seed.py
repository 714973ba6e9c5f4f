"""
Bootstrap the first super admin

Reads SUPER_ADMIN_EMAIL, SUPER_ADMIN_PASSWORD and SUPER_ADMIN_NAME from the
environment (or .env). Running it again for an existing email promotes that
admin to super admin and resets the password.
"""
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

from database.connection import SessionLocal, engine, Base  # noqa: E402
from models.admin import Admin, Role  # noqa: E402
import models  # noqa: E402,F401

logger = logging.getLogger("seed")


def seed_super_admin(email: str, password: str, name: str = "Super Admin") -> Admin:
    Base.metadata.create_all(bind=engine)
    email = email.strip().lower()

    db = SessionLocal()
    try:
        admin = db.query(Admin).filter(Admin.email == email).first()
        if admin:
            logger.info("Admin %s already exists, promoting to super admin", email)
            admin.role = Role.SUPER_ADMIN
            admin.password_hash = Admin.hash_password(password)
        else:
            admin = Admin(
                name=name,
                email=email,
                password_hash=Admin.hash_password(password),
                role=Role.SUPER_ADMIN
            )
            db.add(admin)

        db.commit()
        db.refresh(admin)
        logger.info("Super admin ready: %s (id %s)", admin.email, admin.id)
        return admin
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    email = os.getenv("SUPER_ADMIN_EMAIL")
    password = os.getenv("SUPER_ADMIN_PASSWORD")
    if not email or not password:
        logger.error("SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD must be set")
        sys.exit(1)

    seed_super_admin(email, password, os.getenv("SUPER_ADMIN_NAME", "Super Admin"))
