"""OpsDesk bootstrap — wires config, logging, collaborators and the record store.

Run ``python -m opsdesk.main`` to print the seeded dashboard summary.
"""

import json
from typing import Optional

from .collaborators.attachment_storage import InMemoryAttachmentStorage
from .collaborators.roster import TeamRoster
from .config import OpsDeskConfig, get_config
from .engine.aggregation import dashboard_summary, workload_percent
from .engine.record_store import RecordStore
from .models.variants import INCIDENT, get_variant
from .seed import demo_incidents, demo_roster
from .utils.logging import get_logger, setup_logging

logger = get_logger("main")


def build_store(config: Optional[OpsDeskConfig] = None, roster: Optional[TeamRoster] = None) -> RecordStore:
    """Create a record store for the configured variant, seeded if enabled."""
    config = config or get_config()
    variant = get_variant(config.record_variant)
    seed = config.seed_demo_data and variant is INCIDENT

    if roster is None:
        roster = TeamRoster(demo_roster() if seed else ())

    store = RecordStore(
        variant=variant,
        roster=roster,
        attachment_storage=InMemoryAttachmentStorage(),
        config=config,
    )
    store.init(demo_incidents() if seed else ())
    return store


def command_center_snapshot(store: RecordStore, config: OpsDeskConfig) -> dict:
    """Dashboard summary plus roster workload, as plain data."""
    records = store.list()
    return {
        "variant": store.variant.name,
        "summary": dashboard_summary(records, store.variant),
        "team": [
            {
                **member.to_dict(),
                "workload_percent": workload_percent(
                    member, config.workload_per_assignment, config.workload_cap
                ),
            }
            for member in store.roster.members()
        ],
    }


def main() -> None:
    config = get_config()
    setup_logging(
        debug=config.debug,
        log_dir=config.log_dir,
        log_max_bytes=config.log_max_bytes,
        log_backup_count=config.log_backup_count,
    )
    store = build_store(config)
    logger.info("command_center_ready", app=config.app_name, variant=store.variant.name, records=len(store))
    print(json.dumps(command_center_snapshot(store, config), indent=2))


if __name__ == "__main__":
    main()
