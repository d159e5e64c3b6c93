"""Callback query handlers for inline buttons."""
from telegram import Update
from telegram.ext import ContextTypes

ALERT_CALLBACK_PATTERN = r"^alert_"


async def alert_button_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle the "Set price alert" button.

    Callback data format: "alert_<mint_address>"
    """
    query = update.callback_query
    await query.answer()

    mint_address = query.data[len("alert_"):]
    if not mint_address:
        await query.message.reply_text("❌ Invalid alert button.")
        return

    await query.message.reply_text(
        f"To set a price alert, send:\n/alert {mint_address} [price_in_sol]\n\n"
        f"Example: /alert {mint_address} 5.5"
    )
