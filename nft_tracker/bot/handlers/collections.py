"""Collection command handlers."""
import logging
from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes
from nft_tracker.bot.handlers.tracking import is_valid_mint
from nft_tracker.core.config import settings
from nft_tracker.core.container import BotServices, get_services
from nft_tracker.providers import ProviderError
from nft_tracker.services import ReplySink
from nft_tracker.utils.formatting import format_collection_summary, format_sol

logger = logging.getLogger(__name__)


async def _resolve_symbol(services: BotServices, value: str) -> str:
    """Accept a collection symbol, or a mint whose collection is looked up."""
    if not is_valid_mint(value):
        return value

    metadata = await services.provider.get_token_metadata(value)
    if not metadata.collection:
        raise ProviderError(f"{value} does not belong to a known collection")
    return metadata.collection


async def _track_collection(update: Update, services: BotServices, symbol: str):
    """Fetch, store and reply with a collection snapshot."""
    snapshot = await services.provider.get_collection_snapshot(symbol)
    services.collections.put(snapshot)
    logger.info(f"Tracking collection {symbol}")

    await update.message.reply_text(
        f"✅ Now tracking collection\n\n{format_collection_summary(snapshot)}",
        parse_mode=ParseMode.HTML
    )


async def trench_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /trench command.
    Tracks the default Trench Demons collection.
    """
    symbol = settings.default_collection_symbol
    services = get_services(context)

    try:
        await update.message.reply_text("🔄 Fetching Trench Demons collection data...")
        await _track_collection(update, services, symbol)
    except Exception as e:
        logger.error(f"Error in trench_command: {e}", exc_info=True)
        await update.message.reply_text("❌ Failed to track Trench Demons collection.")


async def collection_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /collection SYMBOL_OR_MINT command.
    Tracks any collection by symbol or by one of its mints.
    """
    if not context.args:
        await update.message.reply_text(
            "Please provide a collection symbol or NFT mint.\n"
            "Usage: /collection SYMBOL\nExample: /collection trench_demons"
        )
        return

    services = get_services(context)
    try:
        symbol = await _resolve_symbol(services, context.args[0])
        await _track_collection(update, services, symbol)
    except Exception as e:
        logger.error(f"Error in collection_command: {e}", exc_info=True)
        await update.message.reply_text(
            "❌ Failed to fetch collection data. Please check the symbol and try again."
        )


async def floor_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /floor [SYMBOL] command.
    Shows the current floor price of a collection.
    """
    services = get_services(context)
    try:
        value = context.args[0] if context.args else settings.default_collection_symbol
        symbol = await _resolve_symbol(services, value)
        stats = await services.provider.get_collection_stats(symbol)
    except Exception as e:
        logger.error(f"Error in floor_command: {e}", exc_info=True)
        await update.message.reply_text("❌ Failed to fetch floor price.")
        return

    await update.message.reply_text(
        f"🏷 {symbol}\n"
        f"Floor: {format_sol(stats.floor_price, 3)}\n"
        f"Listed: {stats.listed_count}\n"
        f"24h Volume: {stats.volume_24h:.2f} SOL"
    )


async def lastbuy_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /lastbuy [SYMBOL] command.
    Posts the collection's sales from the recency window.
    """
    symbol = context.args[0] if context.args else settings.default_collection_symbol
    services = get_services(context)
    notifier = services.sale_notifier

    try:
        delivered = await notifier.notify_recent_sales(
            symbol,
            settings.lastbuy_limit,
            ReplySink(update.message)
        )
    except Exception as e:
        logger.error(f"Error in lastbuy_command: {e}", exc_info=True)
        await update.message.reply_text(f"❌ Failed to fetch recent sales: {e}")
        return

    if delivered == 0:
        await update.message.reply_text(
            f"No {symbol} sales in the last {notifier.window_seconds} seconds."
        )
