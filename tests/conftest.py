from __future__ import annotations

import pytest

from kiosk import Language, MenuCatalog, MenuEntry, VoiceOrderParser
from kiosk.config import DEFAULT_MENU_PATH


_AZURE_VARS = (
    "AZURE_SPEECH_KEY",
    "SPEECH_KEY",
    "AZURE_SPEECH_REGION",
    "SPEECH_REGION",
    "AZURE_SPEECH_ENDPOINT",
    "SPEECH_ENDPOINT",
    "AZURE_SPEECH_LANGUAGE",
    "AZURE_OPENAI_API_KEY",
    "AUDIO_OPENAI_ENDPOINT",
    "AZURE_AUDIO_ENDPOINT",
    "AUDIO_OPENAI_DEPLOYMENT",
)


def make_entry(entry_id, price, category="main", names=None, keywords=None, **kwargs):
    return MenuEntry(
        id=entry_id,
        display_name=names or {Language.EN: entry_id.title()},
        keywords={lang: tuple(words) for lang, words in (keywords or {}).items()},
        price=price,
        category=category,
        **kwargs,
    )


@pytest.fixture
def catalog():
    menu = MenuCatalog()
    menu.bootstrap_from_file(DEFAULT_MENU_PATH)
    return menu


@pytest.fixture
def parser(catalog):
    return VoiceOrderParser(catalog)


@pytest.fixture
def entries(catalog):
    return {entry.id: entry for entry in catalog.list()}


@pytest.fixture
def no_azure_env(monkeypatch):
    for name in _AZURE_VARS:
        monkeypatch.delenv(name, raising=False)
