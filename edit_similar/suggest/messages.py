"""
Message composition for the post-edit suggestion box.

Three messages exist:

  editsimilar-thanks            pages share a category with the edited page
  editsimilar-thanks-notsimilar pages just need attention
  editsimilar-thankyou          nothing to suggest; plain thanks for
                                registered users when always_show_thanks is on

Templates take ``{pages}`` (the joined page list), ``{these}`` and ``{noun}``
("this page" or "these pages"), and ``{user}``.
"""

from __future__ import annotations

import html
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from edit_similar.models.page import Page
from edit_similar.models.user import User

MSG_THANKS = "editsimilar-thanks"
MSG_THANKS_NOTSIMILAR = "editsimilar-thanks-notsimilar"
MSG_THANKYOU = "editsimilar-thankyou"

TEMPLATES: dict[str, str] = {
    MSG_THANKS: (
        "Thanks for your edit! Please also take a look at {these} similar {noun}, "
        "which could use your help: {pages}."
    ),
    MSG_THANKS_NOTSIMILAR: (
        "Thanks for your edit! You might also want to help out with {these} {noun}: {pages}."
    ),
    MSG_THANKYOU: "Thank you for your edit, {user}!",
}


@dataclass(frozen=True)
class SuggestionMessage:
    """A composed message ready for display.

    Attributes:
        key:       Message key (one of the ``MSG_*`` constants).
        pages:     Pages linked from the message, in display order.
        user_name: Name substituted into ``{user}``.
    """

    key:       str
    pages:     tuple[Page, ...] = ()
    user_name: str = ""

    @property
    def text(self) -> str:
        """Plain-text body."""
        return self.fill([p.display_title for p in self.pages], self.user_name)

    def fill(self, page_parts: Sequence[str], user: str) -> str:
        """Fill the template with pre-rendered page parts and user name."""
        return TEMPLATES[self.key].format(
            pages=list_to_text(page_parts),
            these="this" if len(self.pages) == 1 else "these",
            noun="page" if len(self.pages) == 1 else "pages",
            user=user,
        )


def list_to_text(items: Sequence[str]) -> str:
    """Join items as ``"A"``, ``"A and B"`` or ``"A, B and C"``."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} and {items[-1]}"


def compose_message(
    pages: Sequence[Page],
    similar: bool,
    user: User,
    always_show_thanks: bool = False,
) -> Optional[SuggestionMessage]:
    """Pick the message for a finished suggestion run.

    Args:
        pages: Resolved pages to suggest; may be empty.
        similar: Whether the pages came from the topical tier.
        user: The user who edited.
        always_show_thanks: Thank registered users when ``pages`` is empty.

    Returns:
        A ``SuggestionMessage``, or ``None`` when nothing should be shown.
    """
    if pages:
        key = MSG_THANKS if similar else MSG_THANKS_NOTSIMILAR
        return SuggestionMessage(key, tuple(pages), user.name)

    if user.is_registered and always_show_thanks:
        return SuggestionMessage(MSG_THANKYOU, (), user.name)

    return None


def render_html(message: SuggestionMessage, user: User, preferences_url: str) -> str:
    """Render ``message`` as the suggestion box HTML.

    Page titles become links; registered users also get a link to the
    preference that turns suggestions off.
    """
    links = [
        f'<a href="/wiki/{html.escape(p.title, quote=True)}">{html.escape(p.display_title)}</a>'
        for p in message.pages
    ]
    body = message.fill(links, html.escape(message.user_name))

    dismiss = ""
    if user.is_registered:
        dismiss = (
            '<div class="editsimilar_dismiss">[<span class="plainlinks">'
            f'<a href="{html.escape(preferences_url, quote=True)}" id="editsimilar_preferences">'
            "disable these suggestions</a></span>]</div>"
        )

    return (
        '<div id="editsimilar_links" class="usermessage editsimilar">'
        f"<div>{body}</div>{dismiss}</div>"
    )
