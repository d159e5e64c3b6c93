"""Telegram message formatting utilities.

All rich messages are rendered for Telegram's HTML parse mode.
"""
from datetime import datetime, timezone
from html import escape
from typing import List, Optional
from nft_tracker.models import TrackedNFT, CollectionActivity
from nft_tracker.providers.models import SaleActivity


LAMPORTS_PER_SOL = 1_000_000_000


def lamports_to_sol(lamports: int) -> float:
    """Convert lamports to SOL."""
    return lamports / LAMPORTS_PER_SOL


def format_sol(lamports: Optional[int], decimals: int = 2) -> str:
    """Format a lamport amount as a SOL string, or N/A when unknown."""
    if lamports is None:
        return "N/A"
    return f"{lamports_to_sol(lamports):.{decimals}f} SOL"


def shorten(value: str, left: int = 6, right: int = 4) -> str:
    """Truncate an address to its head and tail."""
    if not value or len(value) <= left + right + 3:
        return value
    return f"{value[:left]}...{value[-right:]}"


def marketplace_collection_url(symbol: str) -> str:
    return f"https://magiceden.io/marketplace/{symbol}"


def marketplace_item_url(mint_address: str) -> str:
    return f"https://magiceden.io/item-details/{mint_address}"


def tensor_item_url(mint_address: str) -> str:
    return f"https://www.tensor.trade/item/{mint_address}"


def explorer_account_url(address: str) -> str:
    return f"https://solscan.io/account/{address}"


def explorer_tx_url(signature: str) -> str:
    return f"https://solscan.io/tx/{signature}"


def fallback_nft_name(symbol: str, mint_address: str) -> str:
    """Synthesize a display name when metadata is unavailable."""
    return f"{symbol} #{shorten(mint_address, 4, 4)}"


def format_tracked_list(nfts: List[TrackedNFT]) -> str:
    """
    Format a chat's tracked NFTs for display.

    Args:
        nfts: Entries in registry order

    Returns:
        Formatted message string
    """
    if not nfts:
        return "You are not tracking any NFTs yet. Use /track [mint_address] to start."

    lines = ["📋 <b>Your Tracked NFTs</b>", ""]
    for nft in nfts:
        lines.append(f"🔹 <b>{escape(nft.name)}</b>")
        lines.append(f"Mint: <code>{shorten(nft.mint_address)}</code>")
        lines.append(f"Collection: {escape(nft.collection or 'N/A')}")
        if nft.last_price:
            lines.append(f"Last price: {format_sol(nft.last_price)}")
        if nft.alert_price:
            lines.append(f"Alert: {nft.alert_price} SOL")
        lines.append("")

    return "\n".join(lines).rstrip()


def format_price_alert(nft: TrackedNFT, current_price: int, alert_price: float) -> str:
    """Format the notification sent when a price alert fires."""
    return (
        f"🚨 <b>Price Alert</b>\n"
        f"NFT: {escape(nft.name or 'Unnamed NFT')}\n"
        f"Current Price: {format_sol(current_price)}\n"
        f"Your Alert: {alert_price} SOL\n\n"
        f"Mint: <code>{nft.mint_address}</code>"
    )


def format_collection_summary(snapshot: CollectionActivity) -> str:
    """
    Format a collection snapshot.

    Args:
        snapshot: Latest collection snapshot

    Returns:
        Formatted message string
    """
    lines = [
        f"📊 <b>{escape(snapshot.name)}</b> ({escape(snapshot.symbol)})",
        "",
        f"Floor: {format_sol(snapshot.floor_price, 3)}",
        f"Listed: {snapshot.listed_count}",
        f"24h Volume: {snapshot.volume_24h:.2f} SOL",
    ]

    if snapshot.last_sale:
        sale = snapshot.last_sale
        lines.append(
            f"Last Sale: {sale.price:.3f} SOL "
            f"({sale.timestamp.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')})"
        )

    if snapshot.marketplace_url:
        lines.append("")
        lines.append(f'<a href="{escape(snapshot.marketplace_url)}">View on Magic Eden</a>')

    return "\n".join(lines)


def format_sale_message(sale: SaleActivity, name: str, symbol: str) -> str:
    """
    Format a sale notification caption.

    Args:
        sale: Buy activity
        name: Display name of the NFT
        symbol: Collection symbol

    Returns:
        Formatted caption string
    """
    buyer = sale.buyer or ""
    buyer_line = (
        f'<a href="{explorer_account_url(buyer)}">{shorten(buyer, 4, 4)}</a>'
        if buyer else "Unknown"
    )
    sold_at = sale.block_time.astimezone(timezone.utc).strftime('%H:%M:%S UTC')

    lines = [
        f"🛒 <b>{escape(name)}</b> SOLD!",
        "",
        f"💰 Price: {sale.price:.3f} SOL",
        f"👤 Buyer: {buyer_line}",
        f"🏷 Collection: {escape(symbol)}",
        f"🕐 {sold_at}",
        "",
        f'<a href="{marketplace_item_url(sale.token_mint)}">Magic Eden</a> | '
        f'<a href="{tensor_item_url(sale.token_mint)}">Tensor</a>',
    ]
    if sale.signature:
        lines[-1] += f' | <a href="{explorer_tx_url(sale.signature)}">Tx</a>'

    return "\n".join(lines)


def format_timestamp(value: Optional[datetime] = None) -> str:
    """Format a UTC timestamp for status output."""
    value = value or datetime.now(timezone.utc)
    return value.strftime('%Y-%m-%d %H:%M UTC')
