"""
Host glue: wire the suggestion engine into page-save and page-output events.

Flow for one edit:

  1. ``on_page_save_complete`` — the host calls this after a save. If the
     editor has suggestions enabled and the page is in a content namespace,
     the session is flagged as "just saved".
  2. ``on_output_before_html`` — the host calls this while rendering the
     next article view. If the session is flagged, the throttle is checked,
     the engine runs, the sampled IDs are resolved to titles, and a message
     is returned for the host to display. The flag is cleared either way.

Rendering must never fail because of suggestions: a store failure is logged
and the hook returns ``None``.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass
from typing import Optional, Protocol

from edit_similar.config import EditSimilarConfig
from edit_similar.db.repositories.category_repo import CategoryRepository, CategoryStoreError
from edit_similar.db.repositories.message_repo import MARKER_CATEGORIES_KEY, MessageRepository
from edit_similar.db.repositories.page_repo import PageRepository
from edit_similar.db.repositories.preference_repo import PreferenceRepository
from edit_similar.models.page import Page
from edit_similar.models.user import User
from edit_similar.suggest.engine import CategoryStore, RecommendationEngine, RecommendationResult
from edit_similar.suggest.markers import MarkerRegistry
from edit_similar.suggest.messages import SuggestionMessage, compose_message
from edit_similar.suggest.throttle import DisplayThrottle, SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuggestionRun:
    """Outcome of one suggestion run.

    Attributes:
        result:  Sampled IDs and tier, or ``None`` when nothing was found.
        pages:   Sampled pages that survived title filtering.
        message: Message to show, or ``None``.
    """

    result:  Optional[RecommendationResult]
    pages:   tuple[Page, ...]
    message: Optional[SuggestionMessage]


class TitleResolver(Protocol):
    def ids_to_titles(
        self, page_ids: Sequence[int], content_namespaces: Collection[int]
    ) -> list[Page]: ...


class EditSimilarHooks:
    """Event handlers for one host.

    Args:
        config:        Suggestion settings.
        store:         Category relation for the engine.
        titles:        Resolves sampled IDs to displayable pages.
        markers:       Marker category registry.
        is_enabled:    ``is_enabled(user_id)`` → the user's suggestion toggle.
    """

    def __init__(
        self,
        config: EditSimilarConfig,
        store: CategoryStore,
        titles: TitleResolver,
        markers: MarkerRegistry,
        is_enabled: Callable[[int], bool] = lambda user_id: True,
    ) -> None:
        self.config = config
        self.engine = RecommendationEngine(
            store,
            pool_limit=config.pool_limit,
            display_limit=config.display_limit,
        )
        self.titles = titles
        self.markers = markers
        self.throttle = DisplayThrottle(config.counter_value)
        self.is_enabled = is_enabled

    def on_page_save_complete(self, session: SessionState, page: Page, user: User) -> None:
        """Flag the session when a qualifying save happened."""
        if not self.is_enabled(user.user_id):
            return
        if page.namespace not in self.config.content_namespaces:
            return
        session.saved = True

    def on_output_before_html(
        self,
        session: SessionState,
        page: Page,
        user: User,
        is_article: bool = True,
    ) -> Optional[SuggestionMessage]:
        """Return the suggestion message to show on this page view, if any."""
        if not (session.saved and is_article and self.is_enabled(user.user_id)):
            return None

        try:
            if not self.throttle.should_display(session):
                return None
            return self.suggest(page, user).message
        except (CategoryStoreError, sqlite3.Error):
            logger.exception("Edit suggestions failed for page %d.", page.page_id)
            return None
        finally:
            session.saved = False

    def suggest(self, page: Page, user: User) -> SuggestionRun:
        """Run the suggestion flow for ``page`` without touching any session.

        Store failures propagate; ``on_output_before_html`` is the caller
        that turns them into "nothing shown".
        """
        result = self.engine.recommend(page.page_id, self.markers.load())

        pages: list[Page] = []
        similar = False
        if result is not None:
            pages = self.titles.ids_to_titles(result.ids, self.config.content_namespaces)
            similar = result.similar
            logger.info(
                "Suggesting %d page(s) after edit of page %d (similar=%s).",
                len(pages), page.page_id, similar,
            )

        message = compose_message(pages, similar, user, self.config.always_show_thanks)
        return SuggestionRun(result=result, pages=tuple(pages), message=message)


def marker_source(
    messages: MessageRepository,
    fallback: Optional[str] = None,
) -> Callable[[], Optional[str]]:
    """Return a text source reading the marker message, falling back to ``fallback``."""

    def source() -> Optional[str]:
        text = messages.get_text(MARKER_CATEGORIES_KEY)
        return fallback if text is None else text

    return source


def build_hooks(conn: sqlite3.Connection, config: EditSimilarConfig) -> EditSimilarHooks:
    """Wire SQLite repositories on ``conn`` into an ``EditSimilarHooks``."""
    preferences = PreferenceRepository(conn)
    return EditSimilarHooks(
        config=config,
        store=CategoryRepository(conn),
        titles=PageRepository(conn),
        markers=MarkerRegistry(marker_source(MessageRepository(conn), config.marker_text)),
        is_enabled=preferences.is_enabled,
    )
