"""Shared test fixtures for gamescript tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gamescript.translation.memory import TranslationMemory


def make_command(code: int, *parameters) -> dict:
    """Create an RPG Maker event command."""
    return {"code": code, "indent": 0, "parameters": list(parameters)}


def make_map(*events: dict | None) -> dict:
    """Create a minimal MapXXX.json document."""
    return {"displayName": "", "width": 17, "height": 13, "events": [None, *events]}


def make_event(name: str, *pages: list[dict]) -> dict:
    return {
        "id": 1,
        "name": name,
        "pages": [{"list": [*commands, make_command(0)]} for commands in pages],
    }


def dump(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


@pytest.fixture
def map_data() -> dict:
    """Map with one dialogue event, one choice and a non-text command."""
    return make_map(
        make_event(
            "Guard",
            [
                make_command(101, "Actor1", 0, 0, 2),
                make_command(401, "Halt! Who goes there?"),
                make_command(401, "State your business."),
                make_command(102, ["Friend", "Foe", ""], 1, 0, 2, 0),
            ],
        ),
        make_event(
            "Sign",
            [make_command(401, "Welcome to Lund.")],
        ),
    )


@pytest.fixture
def common_events_data() -> list:
    return [
        None,
        {
            "id": 1,
            "name": "Inn",
            "trigger": 0,
            "list": [
                make_command(401, "Rest here for 10 gold?"),
                make_command(401, ""),
                make_command(0),
            ],
        },
    ]


@pytest.fixture
def actors_data() -> list:
    return [
        None,
        {"id": 1, "name": "Harold", "nickname": "The Brave", "profile": "A young knight.", "classId": 1},
        {"id": 2, "name": "Therese", "nickname": "", "profile": "", "classId": 2},
    ]


@pytest.fixture
def items_data() -> list:
    return [
        None,
        {"id": 1, "name": "Potion", "description": "Restores 500 HP.", "price": 50},
        {"id": 2, "name": "Ether", "description": "", "price": 100},
    ]


@pytest.fixture
def system_data() -> dict:
    return {
        "gameTitle": "Quest of Lund",
        "terms": {
            "basic": ["Level", "Lv", "HP"],
            "commands": ["Fight", "Escape", None],
            "params": ["Max HP"],
            "messages": {"actionFailure": "There was no effect on %1!", "alwaysDash": ""},
        },
        "weaponTypes": ["", "Dagger", "Sword"],
        "armorTypes": ["", "General Armor"],
        "skillTypes": ["", "Magic"],
        "elements": ["", "Physical"],
    }


@pytest.fixture
def troops_data() -> list:
    return [
        None,
        {
            "id": 1,
            "name": "Bat*2",
            "members": [{"enemyId": 1}],
            "pages": [{"list": [make_command(401, "The bats screech!"), make_command(0)]}],
        },
    ]


@pytest.fixture
def kirikiri_text() -> str:
    return (
        "; prologue\n"
        "*start|Prologue\n"
        "@bg storage=room\n"
        "[cm]\n"
        "The rain had not stopped for days.[l][r]\n"
        "\n"
        "[ruby text=\"yo\"]Night fell.[p]\n"
    )


@pytest.fixture
def renpy_text() -> str:
    return (
        "label start:\n"
        "    scene bg room\n"
        '    e "Hello, are you \\"awake\\"?"\n'
        '    "The room was quiet."\n'
        '    e ""\n'
        "    return\n"
    )


@pytest.fixture
def csv_text() -> str:
    return "id,text,notes\n1,Open the door, ask first \n2,Close it,42\n"


@pytest.fixture
def srt_text() -> str:
    return (
        "1\n00:00:01,000 --> 00:00:02,000\nHello there.\n\n"
        "2\n00:00:03,000 --> 00:00:05,000\nTwo lines\nof dialogue.\n"
    )


@pytest.fixture
def tmp_memory(tmp_path: Path):
    """A translation memory backed by a temporary database."""
    memory = TranslationMemory(tmp_path / "memory.db")
    yield memory
    memory.close()
