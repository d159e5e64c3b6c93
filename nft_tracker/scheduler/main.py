"""Scheduler for the periodic alert, collection and sale feed jobs."""
import asyncio
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from telegram import Bot
from nft_tracker.core.config import settings
from nft_tracker.core.container import BotServices
from nft_tracker.services import ChatSink

logger = logging.getLogger(__name__)


class BotScheduler:
    """Runs the background jobs on the bot's event loop."""

    def __init__(self, services: BotServices, bot: Bot):
        logger.debug("Creating AsyncIOScheduler instance")
        self.services = services
        self.bot = bot
        self.scheduler = AsyncIOScheduler(timezone="UTC")

    async def check_alerts(self):
        """Price check cycle."""
        try:
            fired = await self.services.alert_worker.check_alerts()
            if fired:
                logger.info(f"Fired {fired} price alerts")
        except Exception as e:
            logger.error(f"Error in alert check: {e}", exc_info=True)

    async def poll_collections(self):
        """Collection refresh cycle."""
        try:
            await self.services.collection_worker.poll_collections()
        except Exception as e:
            logger.error(f"Error in collection poll: {e}", exc_info=True)

    async def run_sale_feed(self):
        """Announce recent sales of the configured collection to the feed chat."""
        try:
            sink = ChatSink(self.bot, settings.sale_feed_chat_id)
            await self.services.sale_notifier.notify_recent_sales(
                settings.sale_feed_symbol,
                settings.sale_feed_limit,
                sink
            )
        except Exception as e:
            logger.error(f"Error in sale feed for {settings.sale_feed_symbol}: {e}", exc_info=True)

    def start(self):
        """Register jobs and start the scheduler."""
        logger.info("="*60)
        logger.info("Starting scheduler...")
        logger.info(f"Alert check cadence: every {settings.alert_check_interval_seconds} seconds")
        logger.info(f"Collection poll cadence: every {settings.collection_poll_interval_minutes} minutes")

        self.scheduler.add_job(
            self.check_alerts,
            trigger=IntervalTrigger(seconds=settings.alert_check_interval_seconds),
            id="check_alerts",
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self.scheduler.add_job(
            self.poll_collections,
            trigger=IntervalTrigger(minutes=settings.collection_poll_interval_minutes),
            id="poll_collections",
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        if settings.sale_feed_chat_id is not None:
            logger.info(
                f"Sale feed: {settings.sale_feed_symbol} -> chat {settings.sale_feed_chat_id} "
                f"({settings.sale_feed_cron})"
            )
            self.scheduler.add_job(
                self.run_sale_feed,
                trigger=CronTrigger.from_crontab(settings.sale_feed_cron, timezone="UTC"),
                id="sale_feed",
                max_instances=1,
                coalesce=True,
                replace_existing=True
            )
        else:
            logger.info("Sale feed disabled (SALE_FEED_CHAT_ID not set)")

        self.scheduler.start()
        logger.info("Scheduler started successfully")
        logger.info("="*60)

    async def shutdown(self):
        """Stop workers at their next boundary and stop scheduling new cycles."""
        logger.info("Shutting down scheduler...")
        self.services.stop_workers()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            # AsyncIOScheduler applies the stop on the next loop iteration
            await asyncio.sleep(0)

    def job_states(self) -> dict:
        """Next run time per job, for the status page."""
        return {
            job.id: job.next_run_time.isoformat() if job.next_run_time else None
            for job in self.scheduler.get_jobs()
        }
