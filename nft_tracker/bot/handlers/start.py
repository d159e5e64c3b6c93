"""Start and help command handlers."""
import logging
from telegram import Update
from telegram.ext import ContextTypes

logger = logging.getLogger(__name__)


WELCOME_MESSAGE = """
🎨 NFT Tracker Bot 🖼️

I can help you track your favorite NFTs on Solana!

Available commands:
/track MINT - Track an NFT
/untrack MINT - Stop tracking an NFT
/list - Show all tracked NFTs
/alert MINT PRICE_IN_SOL - Set price alert
/help - Show every command
""".strip()


HELP_MESSAGE = """
Available commands:

/trench - Track the Trench Demons collection
/collection SYMBOL_OR_MINT - Track any collection
/floor [SYMBOL] - Check a collection's floor price
/lastbuy [SYMBOL] - Show sales from the last minute
/track MINT - Track any NFT
/untrack MINT - Stop tracking an NFT
/list - Show all tracked NFTs
/alert MINT PRICE_IN_SOL - Set price alert

Price alerts fire once when the cheapest listing drops to or below your price.
""".strip()


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    try:
        await update.message.reply_text(WELCOME_MESSAGE)
    except Exception as e:
        logger.error(f"Error in start_command: {e}", exc_info=True)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    try:
        await update.message.reply_text(HELP_MESSAGE)
    except Exception as e:
        logger.error(f"Error in help_command: {e}", exc_info=True)
