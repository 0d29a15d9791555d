# supplier_api/initial_data.py
import logging

from supplier_api.core.config import settings
from supplier_api.db.session_async import AsyncSessionLocal
from supplier_api.models.user import User
from supplier_api.services import identity_service
from supplier_api.services.exceptions import IdentityError

logger = logging.getLogger(__name__)


async def create_initial_admin_user() -> User | None:
    """
    Create the initial admin if INITIAL_ADMIN_EMAIL/INITIAL_ADMIN_PASSWORD are
    set and no user with that email exists. The admin receives the
    supplier-delete claim. Idempotent; a password the policy rejects is
    logged and the app starts without the admin.
    """
    if not settings.INITIAL_ADMIN_EMAIL or not settings.INITIAL_ADMIN_PASSWORD:
        logger.info("Skipping admin init: INITIAL_ADMIN_EMAIL or INITIAL_ADMIN_PASSWORD missing.")
        return None

    async with AsyncSessionLocal() as session:
        existing = await identity_service.get_by_email(session, settings.INITIAL_ADMIN_EMAIL)
        if existing is not None:
            logger.info("Initial admin already present.", extra={"email": settings.INITIAL_ADMIN_EMAIL})
            return existing

        try:
            user = await identity_service.register(
                session, settings.INITIAL_ADMIN_EMAIL, settings.INITIAL_ADMIN_PASSWORD
            )
        except IdentityError as exc:
            logger.error(
                "Initial admin not created: INITIAL_ADMIN_PASSWORD rejected.",
                extra={
                    "email": settings.INITIAL_ADMIN_EMAIL,
                    "reasons": [error["code"] for error in exc.errors],
                },
            )
            return None

        await identity_service.add_claim(session, user, settings.SUPPLIER_DELETE_CLAIM, "true")
        logger.info("Initial admin created.", extra={"email": user.email, "user_id": str(user.id)})
        return user
