"""
Dashboard renderer module for turning a DashboardState into an HTML page.

This module provides the DashboardRenderer class which handles:
- Rendering the header with the feed selector and controls
- Rendering the error banner, loading skeleton and empty state
- Rendering the article card grid
- Writing the page to disk
"""

import datetime
import email.utils
import logging
from html import escape
from typing import Optional

from feed_dashboard.models import Article, DashboardState

logger = logging.getLogger(__name__)

LOADING_TITLE = "Loading Feeds..."
EMPTY_MESSAGE = "No articles found in this feed."
SKELETON_CARDS = 6


def parse_date(value: Optional[str]) -> Optional[datetime.datetime]:
    """Parses ISO 8601 or RFC 822 dates, returning None when neither fits."""
    if not value:
        return None
    try:
        return datetime.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def format_date(value: Optional[str]) -> str:
    """Formats a feed date like 'Mar 5, 2024, 02:30 PM'; unknown formats pass through."""
    if not value:
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed:%Y, %I:%M %p}"


class DashboardRenderer:
    """Renders dashboard state as a standalone HTML page."""

    _STYLES = {
        "body": "font-family: 'Segoe UI', sans-serif; margin: 0;",
        "header": "position: sticky; top: 0; padding: 12px 24px; border-bottom: 1px solid #e2e8f0;",
        "title": "font-size: 20px; font-weight: bold; color: #1d4ed8;",
        "chips": "display: flex; gap: 8px; overflow-x: auto; padding: 8px 0;",
        "chip": "padding: 6px 16px; border-radius: 999px; border: 1px solid #cbd5e1;",
        "chip_active": "padding: 6px 16px; border-radius: 999px; background: #2563eb; color: white;",
        "progress": "height: 3px; background: #2563eb;",
        "main": "max-width: 1152px; margin: 0 auto; padding: 32px 24px;",
        "error": "display: flex; gap: 12px; padding: 16px; margin-bottom: 32px; color: #b91c1c; border: 1px solid #fecaca; border-radius: 12px;",
        "grid": "display: grid; grid-template-columns: repeat(auto-fill, minmax(300px, 1fr)); gap: 24px;",
        "card": "display: flex; flex-direction: column; border-radius: 12px; border: 1px solid #f1f5f9; overflow: hidden;",
        "skeleton": "height: 384px; border-radius: 12px; background: #e2e8f0;",
        "image": "width: 100%; height: 192px; object-fit: cover;",
        "meta": "font-size: 12px; color: #64748b; margin-bottom: 12px;",
        "card_title": "font-size: 18px; margin: 0 0 12px;",
        "excerpt": "font-size: 14px; color: #475569; flex: 1;",
        "empty": "text-align: center; padding: 80px 0; color: #64748b;",
        "footer": "margin-top: 48px; text-align: center; font-size: 12px; color: #94a3b8;",
    }

    def _render_header(self, state: DashboardState) -> str:
        loading = state["global_loading"]
        title = LOADING_TITLE if loading else state["current_title"]
        refresh_label = "Updating All..." if loading else "Refresh All"
        disabled = " disabled" if loading else ""
        theme_label = "Light mode" if state["dark_mode"] else "Dark mode"
        rotation = state["rotation"]
        rotation_label = "Stop rotation" if rotation["enabled"] else "Rotate feeds"

        chips = ""
        for feed in state["feed_list"]:
            style = self._STYLES["chip_active"] if feed["active"] else self._STYLES["chip"]
            chips += (
                f'<button data-action="select-feed" data-feed-id="{escape(feed["id"])}" '
                f'style="{style}">{escape(feed["label"])}</button>'
            )

        progress = ""
        if rotation["enabled"]:
            width = round(rotation["progress_fraction"] * 100, 2)
            progress = f'<div class="rotation-progress" style="{self._STYLES["progress"]} width: {width}%;"></div>'

        return f"""
        <header style="{self._STYLES['header']}">
            <h1 style="{self._STYLES['title']}">{escape(title)}</h1>
            <button data-action="toggle-theme">{theme_label}</button>
            <button data-action="toggle-rotation">{rotation_label}</button>
            <button data-action="refresh-all"{disabled}>{refresh_label}</button>
            <nav style="{self._STYLES['chips']}">{chips}</nav>
            {progress}
        </header>
        """

    def _render_card(self, article: Article, position: int) -> str:
        url = escape(article.url or "#")
        if article.image_url:
            image = f'<img src="{escape(article.image_url)}" alt="" style="{self._STYLES["image"]}">'
        else:
            image = '<div class="image-placeholder"></div>'

        meta = ""
        if article.published_at:
            meta += f"<span>{escape(format_date(article.published_at))}</span>"
        if article.author:
            meta += f"<span> &bull; {escape(article.author)}</span>"

        return f"""
            <article data-key="{escape(article.key(position))}" style="{self._STYLES['card']}">
                <a href="{url}" target="_blank" rel="noopener noreferrer">{image}</a>
                <div style="padding: 20px;">
                    <div style="{self._STYLES['meta']}">{meta}</div>
                    <h2 style="{self._STYLES['card_title']}">
                        <a href="{url}" target="_blank" rel="noopener noreferrer">{escape(article.title)}</a>
                    </h2>
                    <p style="{self._STYLES['excerpt']}">{escape(article.body_text)}</p>
                    <a href="{url}" target="_blank" rel="noopener noreferrer">Read Article</a>
                </div>
            </article>
            """

    def _render_main(self, state: DashboardState) -> str:
        loading = state["global_loading"]
        items = state["items"]
        body = ""

        if state["error"]:
            body += (
                f'<div class="error-banner" style="{self._STYLES["error"]}">'
                f"<p>{escape(state['error'])}</p>"
                '<button data-action="refresh-all">Retry</button></div>'
            )

        if loading and not state["has_data"]:
            cards = "".join(
                f'<div class="skeleton" style="{self._STYLES["skeleton"]}"></div>'
                for _ in range(SKELETON_CARDS)
            )
            body += f'<div style="{self._STYLES["grid"]}">{cards}</div>'

        if not loading and not items and not state["error"]:
            body += f'<div class="empty-state" style="{self._STYLES["empty"]}"><p>{EMPTY_MESSAGE}</p></div>'

        if items:
            cards = "".join(self._render_card(article, i) for i, article in enumerate(items))
            body += f'<div style="{self._STYLES["grid"]}">{cards}</div>'

        if state["last_updated"] and not loading:
            body += (
                f'<p class="last-updated" style="{self._STYLES["footer"]}">'
                f"Updated: {state['last_updated']:%H:%M:%S}</p>"
            )

        return f'<main style="{self._STYLES["main"]}">{body}</main>'

    def render(self, state: DashboardState) -> str:
        """Generates the full HTML page."""
        html_class = ' class="dark"' if state["dark_mode"] else ""
        return (
            f"<!DOCTYPE html><html{html_class}>"
            '<head><meta charset="utf-8">'
            '<meta name="viewport" content="width=device-width, initial-scale=1">'
            f"<title>{escape(state['current_title'])}</title></head>"
            f'<body style="{self._STYLES["body"]}">'
            f"{self._render_header(state)}{self._render_main(state)}"
            "</body></html>"
        )

    def write(self, state: DashboardState, path: str) -> None:
        """Renders the page and writes it to path."""
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.render(state))
        logger.debug("Dashboard written to %s.", path)
