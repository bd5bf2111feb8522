import logging

from tenacity import (
    after_log,
    before_log,
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from rolepool.core.config import settings
from rolepool.core.pool import PoolConstructionError, RolePoolManager, readiness_check

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)

max_tries = 60 * 5  # 5 minutes
wait_seconds = 1


@retry(
    stop=stop_after_attempt(max_tries),
    wait=wait_fixed(wait_seconds),
    # a rejected config will not fix itself
    retry=retry_if_not_exception_type(PoolConstructionError),
    before=before_log(logger, logging.INFO),
    after=after_log(logger, logging.WARN),
)
def init(manager: RolePoolManager) -> None:
    try:
        manager.init()
        ok, failures = readiness_check(manager)
        if not ok:
            raise RuntimeError(f"Backends not ready: {', '.join(failures)}")
    except Exception as e:
        logger.error(e)
        raise e


def main() -> None:
    logger.info("Initializing connection pools")
    manager = RolePoolManager.from_settings(settings)
    configured = [role.value for role in manager.configured_roles()]
    logger.info("Configured roles: %s", ", ".join(configured) or "none")
    init(manager)
    logger.info("Connection pools ready")
    manager.dispose()


if __name__ == "__main__":
    main()
