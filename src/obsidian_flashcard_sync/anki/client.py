"""AnkiConnect HTTP API client."""

from types import TracebackType
from typing import Any, Literal, cast

import httpx

from obsidian_flashcard_sync.domain.interfaces.anki_client import IAnkiClient
from obsidian_flashcard_sync.exceptions import AnkiConnectError
from obsidian_flashcard_sync.utils.logging import get_logger

logger = get_logger(__name__)

ANKI_CONNECT_VERSION = 6


class AnkiClient(IAnkiClient):
    """Async client for the AnkiConnect HTTP API.

    Calls are never retried here: a failed call surfaces to the caller,
    which decides whether to skip the card or abort the batch.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize client.

        Args:
            url: AnkiConnect URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.url = url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            limits=httpx.Limits(max_keepalive_connections=2, max_connections=4),
        )
        logger.debug("anki_client_initialized", url=url, timeout=timeout)

    async def invoke(self, action: str, params: dict[str, Any] | None = None) -> Any:
        """
        Invoke AnkiConnect action.

        Args:
            action: Action name
            params: Action parameters

        Returns:
            Action result

        Raises:
            AnkiConnectError: If the request fails or Anki reports an error
        """
        payload: dict[str, Any] = {"action": action, "version": ANKI_CONNECT_VERSION}
        if params is not None:
            payload["params"] = params

        logger.debug("anki_invoke", action=action)

        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            msg = "Cannot connect to AnkiConnect"
            raise AnkiConnectError(
                msg,
                suggestion="Make sure Anki is running with the AnkiConnect add-on enabled.",
                context={"url": self.url, "action": action, "error": str(e)},
            ) from e
        except httpx.HTTPStatusError as e:
            msg = f"AnkiConnect returned HTTP {e.response.status_code}"
            raise AnkiConnectError(
                msg, context={"url": self.url, "action": action}
            ) from e
        except httpx.HTTPError as e:
            msg = f"HTTP error calling AnkiConnect: {e}"
            raise AnkiConnectError(
                msg, context={"url": self.url, "action": action}
            ) from e

        try:
            result = response.json()
        except ValueError as e:
            msg = f"Invalid JSON response from AnkiConnect: {e}"
            raise AnkiConnectError(msg, context={"action": action}) from e

        if not isinstance(result, dict):
            msg = "Unexpected response from AnkiConnect"
            raise AnkiConnectError(msg, context={"action": action})

        if result.get("error"):
            raise AnkiConnectError(
                str(result["error"]), context={"action": action}
            )

        return result.get("result")

    async def check_connection(self) -> bool:
        """Check if AnkiConnect is accessible."""
        try:
            version = await self.invoke("version")
        except AnkiConnectError as e:
            logger.warning("anki_connection_warning", url=self.url, error=e.message)
            return False
        logger.debug("anki_connection_ok", url=self.url, version=version)
        return True

    async def create_deck(self, deck_name: str) -> None:
        await self.invoke("createDeck", {"deck": deck_name})
        logger.debug("deck_ensured", deck=deck_name)

    async def add_note(
        self,
        deck_name: str,
        model_name: str,
        fields: dict[str, str],
        tags: list[str] | None = None,
    ) -> int:
        """
        Add a new note.

        Duplicate detection is scoped to the target deck.

        Returns:
            Note ID
        """
        note_payload = {
            "deckName": deck_name,
            "modelName": model_name,
            "fields": fields,
            "tags": tags or [],
            "options": {
                "allowDuplicate": False,
                "duplicateScope": "deck",
                "duplicateScopeOptions": {"deckName": deck_name},
            },
        }
        result = await self.invoke("addNote", {"note": note_payload})
        if result is None:
            msg = "Anki returned no note id for the new note"
            raise AnkiConnectError(msg, context={"deck": deck_name})

        logger.info("note_added", note_id=result, deck=deck_name, note_type=model_name)
        return cast("int", result)

    async def update_note_fields(self, note_id: int, fields: dict[str, str]) -> None:
        await self.invoke(
            "updateNoteFields", {"note": {"id": note_id, "fields": fields}}
        )
        logger.info("note_updated", note_id=note_id)

    async def add_tags(self, note_ids: list[int], tags: list[str]) -> None:
        """
        Add tags to notes.

        Args:
            note_ids: List of note IDs
            tags: Tags to add
        """
        if not note_ids or not tags:
            return
        await self.invoke("addTags", {"notes": note_ids, "tags": " ".join(tags)})
        logger.debug("tags_added", note_ids=note_ids, tags=tags)

    async def find_notes(self, query: str) -> list[int]:
        return cast("list[int]", await self.invoke("findNotes", {"query": query}) or [])

    async def find_note_by_tag(self, tag: str) -> int | None:
        notes = await self.find_notes(f"tag:{tag}")
        if not notes:
            return None
        if len(notes) > 1:
            logger.debug("multiple_notes_for_tag", tag=tag, count=len(notes))
        return notes[0]

    async def notes_info(self, note_ids: list[int]) -> list[dict[str, Any]]:
        if not note_ids:
            return []
        return cast(
            "list[dict[str, Any]]",
            await self.invoke("notesInfo", {"notes": note_ids}) or [],
        )

    async def get_note_card_ids(self, note_id: int) -> list[int]:
        notes = await self.notes_info([note_id])
        # notesInfo answers {} for ids that no longer exist
        if not notes or not notes[0]:
            return []
        return list(notes[0].get("cards") or [])

    async def change_deck(self, card_ids: list[int], deck_name: str) -> None:
        if not card_ids:
            return
        await self.invoke("changeDeck", {"cards": card_ids, "deck": deck_name})
        logger.debug("cards_moved", count=len(card_ids), deck=deck_name)

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
        logger.debug("anki_client_closed", url=self.url)

    async def __aenter__(self) -> "AnkiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        await self.aclose()
        return False
