"""Start or renew the Gmail push subscription (run every few days; watches expire after ~7)."""

from __future__ import annotations

import argparse
import asyncio

from loguru import logger

from autoconfirm.infrastructure import get_settings
from autoconfirm.infrastructure.log_config import configure_logging
from autoconfirm.infrastructure.stores import FileCheckpointStore
from autoconfirm.infrastructure.wiring import build_mailbox_provider


def main() -> int:
    parser = argparse.ArgumentParser(description="Start or renew the Gmail watch on the configured Pub/Sub topic")
    parser.add_argument("--topic", default=None, help="Override topic (default: projects/<GCP_PROJECT_ID>/topics/<GMAIL_TOPIC_NAME>)")
    parser.add_argument("--label", action="append", dest="labels", help="Label to watch (repeatable, default: GMAIL_WATCH_LABELS)")
    parser.add_argument("--no-save", action="store_true", help="Do not write the returned historyId to CHECKPOINT_FILE")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        topic = args.topic or settings.require_topic_path()
    except ValueError as e:
        logger.error(f"{e} (or pass --topic)")
        return 2
    labels = args.labels or list(settings.gmail_watch_labels)

    provider = build_mailbox_provider(settings)
    try:
        subscription = asyncio.run(provider.watch(topic, labels))
    except Exception as e:
        logger.error(f"Failed to start Gmail watch: {e}")
        return 1

    if settings.checkpoint_file and not args.no_save:
        FileCheckpointStore(settings.checkpoint_file).save(subscription.history_id)
        logger.info(f"Saved historyId {subscription.history_id} to {settings.checkpoint_file}")

    print(f"Gmail watch started on {topic} for labels {', '.join(labels)}")
    print(f"historyId: {subscription.history_id}")
    if subscription.expiration:
        print(f"expires: {subscription.expiration.isoformat()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
