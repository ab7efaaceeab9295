"""
Startup verification for the GeoPin server
Checks that the static asset root is usable before the port is opened.
"""

from loguru import logger

from geopin.core.config import Settings


def check_static_dir(settings: Settings) -> bool:
    """The asset root must exist; without it every request fails."""
    static_dir = settings.STATIC_DIR
    if not static_dir.is_dir():
        logger.error(f"❌ Static directory not found: {static_dir}")
        return False

    logger.info(f"✅ Serving static files from {static_dir}")
    return True


def check_entry_point(settings: Settings) -> bool:
    """A missing index.html is survivable: the fallback answers 500 until it appears."""
    if not settings.index_path.is_file():
        logger.warning(f"⚠️  Entry point {settings.index_path} is missing, fallback route will fail")
    return True


def run_startup_checks(settings: Settings) -> bool:
    checks = [check_static_dir, check_entry_point]

    all_passed = True
    for check in checks:
        if not check(settings):
            all_passed = False

    if not all_passed:
        logger.error("Some startup checks failed, refusing to start")
    return all_passed
