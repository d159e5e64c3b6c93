"""Telegram bot main entry point."""
import asyncio
import logging
import traceback
import uvicorn
from telegram import Update
from telegram.ext import Application, CommandHandler, CallbackQueryHandler, ContextTypes
from nft_tracker.api.main import create_app
from nft_tracker.core.config import settings
from nft_tracker.core.container import SERVICES_KEY, build_services
from nft_tracker.scheduler.main import BotScheduler
from nft_tracker.bot.handlers.start import start_command, help_command
from nft_tracker.bot.handlers.tracking import track_command, untrack_command, list_command, alert_command
from nft_tracker.bot.handlers.collections import trench_command, collection_command, floor_command, lastbuy_command
from nft_tracker.bot.handlers.callbacks import alert_button_callback, ALERT_CALLBACK_PATTERN

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, settings.log_level)
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

SCHEDULER_KEY = "scheduler"
STATUS_SERVER_KEY = "status_server"
STATUS_TASK_KEY = "status_task"


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors globally for the Telegram bot.

    Logs the error and tells the user something went wrong.
    """
    tb_list = traceback.format_exception(None, context.error, context.error.__traceback__)
    tb_string = "".join(tb_list)

    logger.error(f"Exception while handling an update: {context.error}")
    logger.error(f"Traceback:\n{tb_string}")

    if update and isinstance(update, Update):
        logger.error(f"Update ID: {update.update_id}")
        if update.effective_chat:
            logger.error(f"Chat: {update.effective_chat.id}")
        if update.effective_message:
            logger.error(f"Message: {update.effective_message.text}")

    if update and isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text(
                "Sorry, an error occurred while processing your request. "
                "Please try again later."
            )
        except Exception as e:
            logger.error(f"Failed to send error message to user: {e}")


async def serve_status(server: uvicorn.Server, port: int) -> None:
    """Run the status server; a failure to bind is logged and the bot keeps running."""
    try:
        await server.serve()
    except (SystemExit, OSError):
        logger.error(f"Status server failed to start on port {port}", exc_info=True)


async def post_init(application: Application) -> None:
    """Start background jobs and the status server once the loop is running."""
    services = application.bot_data[SERVICES_KEY]

    scheduler = BotScheduler(services, application.bot)
    scheduler.start()
    application.bot_data[SCHEDULER_KEY] = scheduler

    if settings.status_port:
        config = uvicorn.Config(
            create_app(services, scheduler),
            host="0.0.0.0",
            port=settings.status_port,
            log_level=settings.log_level.lower()
        )
        server = uvicorn.Server(config)
        application.bot_data[STATUS_SERVER_KEY] = server
        application.bot_data[STATUS_TASK_KEY] = asyncio.create_task(
            serve_status(server, settings.status_port)
        )
        logger.info(f"Status server starting on port {settings.status_port}")


async def post_shutdown(application: Application) -> None:
    """Stop background jobs, the status server and the HTTP client."""
    scheduler = application.bot_data.get(SCHEDULER_KEY)
    if scheduler:
        await scheduler.shutdown()

    server = application.bot_data.get(STATUS_SERVER_KEY)
    task = application.bot_data.get(STATUS_TASK_KEY)
    if server and task:
        server.should_exit = True
        try:
            await asyncio.wait_for(task, timeout=5)
        except asyncio.TimeoutError:
            logger.warning("Status server did not stop within 5s")

    await application.bot_data[SERVICES_KEY].provider.close()
    logger.info("Shutdown complete")


def build_application() -> Application:
    """Create the bot application with all handlers and shared services."""
    application = (
        Application.builder()
        .token(settings.telegram_bot_token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    application.bot_data[SERVICES_KEY] = build_services(application.bot)

    # Register error handler
    application.add_error_handler(error_handler)

    # Register command handlers
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("track", track_command))
    application.add_handler(CommandHandler("untrack", untrack_command))
    application.add_handler(CommandHandler("list", list_command))
    application.add_handler(CommandHandler("alert", alert_command))
    application.add_handler(CommandHandler("trench", trench_command))
    application.add_handler(CommandHandler("collection", collection_command))
    application.add_handler(CommandHandler("floor", floor_command))
    application.add_handler(CommandHandler("lastbuy", lastbuy_command))

    # Register callback query handler
    application.add_handler(CallbackQueryHandler(alert_button_callback, pattern=ALERT_CALLBACK_PATTERN))

    return application


def main():
    """Start the Telegram bot."""
    logger.info("="*60)
    logger.info("Starting NFT tracker bot...")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Marketplace API: {settings.marketplace_base_url}")
    logger.debug(f"Bot token configured: {bool(settings.telegram_bot_token)}")
    logger.info("="*60)

    application = build_application()

    logger.info("All handlers registered successfully")
    logger.info("Bot started successfully - polling for updates")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
