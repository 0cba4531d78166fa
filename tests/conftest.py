"""Shared pytest fixtures for shotlist tests.

Provides sample people, Getty records and normalised results, a mocked
Gemini client, and a helper for building httpx clients backed by
``httpx.MockTransport`` so no test touches the network.
"""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from shotlist.models import GettyMedia, Person, PersonGettyResults


def make_record(
    media_id: str,
    title: str = "A title",
    renditions: tuple[str, ...] = ("thumb", "preview", "comp"),
    date_created: str = "2019-02-10T00:00:00",
) -> dict:
    """Build a raw Getty search record with the given rendition names."""
    return {
        "id": media_id,
        "title": title,
        "date_created": date_created,
        "display_sizes": [
            {"name": name, "uri": f"https://media.example/{media_id}/{name}"}
            for name in renditions
        ],
    }


def make_media(media_id: str, title: str = "A title", date_created: str = "2019-02-10T00:00:00") -> GettyMedia:
    return GettyMedia(
        id=media_id,
        title=title,
        thumbnail_url=f"https://media.example/{media_id}/thumb",
        preview_url=f"https://media.example/{media_id}/preview",
        comp_url=f"https://media.example/{media_id}/comp",
        date_created=date_created,
    )


def mock_http(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose every request is answered by *handler*."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def people() -> list[Person]:
    return [
        Person(name="Jane Doe", search_term="Jane Doe 2024 Met Gala"),
        Person(name="John Roe", search_term="John Roe Cannes 2023"),
    ]


@pytest.fixture
def sample_results(people) -> list[PersonGettyResults]:
    """Two people, each with two videos and two photos."""
    return [
        PersonGettyResults(
            person=people[0],
            videos=[make_media("v1", "Jane arrives"), make_media("v2", "Jane speaks")],
            photos=[make_media("p1", "Jane portrait"), make_media("p2", 'He said "Hi"')],
        ),
        PersonGettyResults(
            person=people[1],
            videos=[make_media("v3", "John arrives"), make_media("v4", "John waves")],
            photos=[make_media("p3", "John portrait"), make_media("p4", "John on stage")],
        ),
    ]


@pytest.fixture
def mock_gemini_client():
    """Mock google-genai client; ``client.aio.models.generate_content`` is awaitable.

    Set ``mock.aio.models.generate_content.return_value.text`` to control
    the model's reply.
    """
    mock = MagicMock()
    mock.aio.models.generate_content = AsyncMock(
        return_value=MagicMock(text='[{"name": "Jane Doe", "searchTerm": "Jane Doe Met Gala"}]')
    )
    return mock
