# main_cli.py
import logging
import sys

from core.exceptions import DomainError
from infra.db.base import create_db_engine, create_session_factory, init_db
from infra.logging_config import setup_logging
from infra.services import build_services

logger = logging.getLogger(__name__)

USAGE = "usage: asset-timeline ASSET_ID LIVE_DATE"


def build_app_services(db_url=None):
    # TL_DB_URL or the per-user SQLite file when db_url is None
    engine = create_db_engine(db_url)
    init_db(engine)
    session = create_session_factory(engine)()

    services = build_services(session)
    services["session"] = session
    return services


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()

    if len(argv) != 2:
        print(USAGE, file=sys.stderr)
        return 2
    asset_id, live_date = argv

    services = build_app_services()
    try:
        result = services["scheduling_service"].recalculate_asset_schedule(asset_id, live_date)
    except DomainError as exc:
        logger.error("Recalculation failed for asset %s: %s", asset_id, exc)
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        services["session"].close()

    critical = set(result.critical_path)
    for task in result.tasks:
        marker = "*" if task.id in critical else " "
        print(f"{marker} {task.start}  {task.end}  {task.duration:>3}d  {task.name}")
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
