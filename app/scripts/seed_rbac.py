"""
Seed the default roles and permissions. Run from project root:
  python -m app.scripts.seed_rbac
Idempotent; re-running only adds what is missing.
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.credential_store import CredentialStore
from app.services.seed import seed_rbac

logger = logging.getLogger(__name__)


def main() -> int:
    configure_logging(get_settings().LOG_LEVEL)
    db = SessionLocal()
    try:
        seed_rbac(CredentialStore(db))
        return 0
    except Exception as e:
        logger.exception("RBAC seed failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
