"""NFT tracking command handlers."""
import logging
import math
from html import escape
from solders.pubkey import Pubkey
from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.ext import ContextTypes
from nft_tracker.core.container import get_services
from nft_tracker.providers import ProviderError
from nft_tracker.services import DuplicateTrackingError, NotTrackedError
from nft_tracker.utils.formatting import format_tracked_list

logger = logging.getLogger(__name__)

EXAMPLE_MINT = "D3XrkNZz6wx6cofot7Zohsf2KSZ2Er8M6Ya8DkE3eG9U"


def is_valid_mint(value: str) -> bool:
    """True if the value parses as a Solana public key."""
    try:
        Pubkey.from_string(value)
    except ValueError:
        return False
    return True


def alert_keyboard(mint_address: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("🔔 Set price alert", callback_data=f"alert_{mint_address}")]
    ])


async def track_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /track MINT command.
    Looks up the NFT and adds it to the chat's tracked list.
    """
    if not context.args:
        await update.message.reply_text(
            f"Please provide an NFT mint address. Example: /track {EXAMPLE_MINT}"
        )
        return

    mint_address = context.args[0]
    chat_id = update.effective_chat.id
    services = get_services(context)

    if not is_valid_mint(mint_address):
        await update.message.reply_text("❌ That does not look like a valid mint address.")
        return

    if services.nfts.is_tracked(mint_address, chat_id):
        await update.message.reply_text("This NFT is already being tracked!")
        return

    try:
        metadata = await services.provider.get_token_metadata(mint_address)
        entry = services.nfts.track(
            mint_address,
            chat_id,
            metadata.name or "Unnamed NFT",
            collection=metadata.collection
        )
    except DuplicateTrackingError:
        await update.message.reply_text("This NFT is already being tracked!")
        return
    except ProviderError as e:
        logger.error(f"Error tracking NFT {mint_address}: {e}")
        await update.message.reply_text(
            "❌ Failed to track NFT. Please check the mint address and try again."
        )
        return

    logger.info(f"Chat {chat_id} now tracking {mint_address}")

    caption = (
        f"✅ <b>Now tracking NFT</b>\n"
        f"Name: {escape(entry.name)}\n"
        f"Mint: <code>{mint_address}</code>\n"
        f"Collection: {escape(metadata.collection_name or metadata.collection or 'N/A')}\n"
        f"Use /alert {mint_address} [price] to set a price alert"
    )
    keyboard = alert_keyboard(mint_address)

    if metadata.image:
        try:
            await update.message.reply_photo(
                photo=metadata.image,
                caption=caption,
                parse_mode=ParseMode.HTML,
                reply_markup=keyboard
            )
            return
        except Exception as e:
            logger.warning(f"Photo reply failed for {mint_address}, sending text: {e}")

    await update.message.reply_text(caption, parse_mode=ParseMode.HTML, reply_markup=keyboard)


async def untrack_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /untrack MINT command.
    Removes an NFT from the chat's tracked list.
    """
    if not context.args:
        await update.message.reply_text("Please provide an NFT mint address to untrack.")
        return

    mint_address = context.args[0]
    services = get_services(context)

    try:
        services.nfts.untrack(mint_address, update.effective_chat.id)
    except NotTrackedError:
        await update.message.reply_text("This NFT is not being tracked.")
        return

    await update.message.reply_text("✅ NFT is no longer being tracked.")


async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /list command.
    Shows the chat's tracked NFTs.
    """
    services = get_services(context)
    nfts = services.nfts.list_for(update.effective_chat.id)

    message = format_tracked_list(nfts)
    await update.message.reply_text(message, parse_mode=ParseMode.HTML)


async def alert_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /alert MINT PRICE command.
    Sets a one-shot price alert in SOL.
    """
    usage = "Please provide a valid mint address and price. Example: /alert D3XrkNZz... 5.5"

    if not context.args or len(context.args) < 2:
        await update.message.reply_text(usage)
        return

    mint_address = context.args[0]
    try:
        price = float(context.args[1])
    except ValueError:
        await update.message.reply_text(usage)
        return

    if not math.isfinite(price) or price <= 0:
        await update.message.reply_text("❌ Alert price must be a positive number of SOL.")
        return

    services = get_services(context)
    try:
        services.nfts.set_alert(mint_address, update.effective_chat.id, price)
    except NotTrackedError:
        await update.message.reply_text("You need to track this NFT first using /track command.")
        return

    await update.message.reply_text(
        f"✅ Price alert set for {price} SOL. "
        f"You'll be notified if the price drops to or below this value."
    )
