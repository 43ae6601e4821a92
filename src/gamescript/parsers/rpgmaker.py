"""Extract translatable strings from RPG Maker MV/MZ JSON data files.

The file kind is recognised from its structure, never from its name. Shapes are
checked in a fixed order and the first match wins; the order matters because
the shapes overlap (actors and common events also carry a ``name`` field).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from gamescript.core.constants import EventCode
from gamescript.core.models import Entry
from gamescript.core.paths import join_index, join_key

logger = logging.getLogger(__name__)

SYSTEM_TERM_LISTS = ("basic", "commands", "params")
SYSTEM_TYPE_LISTS = ("weaponTypes", "armorTypes", "skillTypes", "elements")
ACTOR_FIELDS = ("name", "nickname", "profile")
ENTITY_FIELDS = (
    "name", "description",
    "message1", "message2", "message3", "message4",
    "victoryMessage", "defeatMessage",
)
# Short id suffixes kept from earlier exports
_FIELD_ID = {"description": "desc"}


class RpgShape(str, Enum):
    MAP = "map"
    COMMON_EVENTS = "common_events"
    ACTORS = "actors"
    SYSTEM = "system"
    ENTITY_TABLE = "entity_table"
    TROOPS = "troops"


def _table_check(data: Any, key: str) -> bool:
    return (
        isinstance(data, list)
        and len(data) > 1
        and data[0] is None
        and isinstance(data[1], dict)
        and key in data[1]
    )


def _is_map(data: Any) -> bool:
    return isinstance(data, dict) and isinstance(data.get("events"), list)


def _is_common_events(data: Any) -> bool:
    return _table_check(data, "list")


def _is_actors(data: Any) -> bool:
    return _table_check(data, "nickname")


def _is_system(data: Any) -> bool:
    return isinstance(data, dict) and "gameTitle" in data and "terms" in data


def _is_entity_table(data: Any) -> bool:
    return _table_check(data, "name")


def _is_troops(data: Any) -> bool:
    return _table_check(data, "members")


SHAPE_CHECKS: tuple[tuple[RpgShape, Callable[[Any], bool]], ...] = (
    (RpgShape.MAP, _is_map),
    (RpgShape.COMMON_EVENTS, _is_common_events),
    (RpgShape.ACTORS, _is_actors),
    (RpgShape.SYSTEM, _is_system),
    (RpgShape.ENTITY_TABLE, _is_entity_table),
    (RpgShape.TROOPS, _is_troops),
)


def detect_shape(data: Any) -> RpgShape | None:
    for shape, check in SHAPE_CHECKS:
        if check(data):
            return shape
    return None


def _records(data: list) -> list[tuple[int, dict]]:
    return [(i, rec) for i, rec in enumerate(data) if isinstance(rec, dict)]


def _commands(container: Any, key: str = "list") -> list[tuple[int, dict]]:
    cmds = container.get(key) if isinstance(container, dict) else None
    if not isinstance(cmds, list):
        return []
    return [(i, c) for i, c in enumerate(cmds) if isinstance(c, dict)]


def _first_param(cmd: dict) -> Any:
    params = cmd.get("parameters")
    if isinstance(params, list) and params:
        return params[0]
    return None


def _show_text(cmd: dict) -> str | None:
    if cmd.get("code") != EventCode.SHOW_TEXT:
        return None
    text = _first_param(cmd)
    return text if isinstance(text, str) and text else None


def _extract_map(filename: str, data: dict) -> list[Entry]:
    entries: list[Entry] = []
    for e_idx, event in enumerate(data["events"]):
        if not isinstance(event, dict):
            continue
        label = event.get("name") or "Unnamed"
        pages = event.get("pages")
        if not isinstance(pages, list):
            continue
        for p_idx, page in enumerate(pages):
            for c_idx, cmd in _commands(page):
                base = f"events[{e_idx}].pages[{p_idx}].list[{c_idx}].parameters[0]"

                text = _show_text(cmd)
                if text is not None:
                    entries.append(Entry(
                        id=f"map-{filename}-{e_idx}-{p_idx}-{c_idx}",
                        original=text,
                        path=base,
                        file=filename,
                        context=f"Event: {label}",
                    ))

                if cmd.get("code") == EventCode.SHOW_CHOICES:
                    choices = _first_param(cmd)
                    if not isinstance(choices, list):
                        continue
                    for ch_idx, choice in enumerate(choices):
                        if not isinstance(choice, str) or not choice:
                            continue
                        entries.append(Entry(
                            id=f"choice-{filename}-{e_idx}-{p_idx}-{c_idx}-{ch_idx}",
                            original=choice,
                            path=join_index(base, ch_idx),
                            file=filename,
                            context=f"Choice in Event: {label}",
                        ))
    return entries


def _extract_common_events(filename: str, data: list) -> list[Entry]:
    entries: list[Entry] = []
    for e_idx, event in _records(data):
        for c_idx, cmd in _commands(event):
            text = _show_text(cmd)
            if text is None:
                continue
            entries.append(Entry(
                id=f"common-{filename}-{e_idx}-{c_idx}",
                original=text,
                path=f"[{e_idx}].list[{c_idx}].parameters[0]",
                file=filename,
                context=f"Common Event: {event.get('name', '')}",
            ))
    return entries


def _extract_fields(
    filename: str,
    data: list,
    fields: tuple[str, ...],
    id_prefix: str,
) -> list[Entry]:
    entries: list[Entry] = []
    for idx, record in _records(data):
        for name in fields:
            value = record.get(name)
            if not isinstance(value, str) or not value:
                continue
            entries.append(Entry(
                id=f"{id_prefix}-{filename}-{idx}-{_FIELD_ID.get(name, name)}",
                original=value,
                path=join_key(f"[{idx}]", name),
                file=filename,
                context=f"{filename} {name}",
            ))
    return entries


def _extract_system(filename: str, data: dict) -> list[Entry]:
    entries: list[Entry] = []

    title = data.get("gameTitle")
    if isinstance(title, str) and title:
        entries.append(Entry(
            id=f"system-{filename}-gameTitle",
            original=title,
            path="gameTitle",
            file=filename,
            context="Game title",
        ))

    terms = data.get("terms")
    if not isinstance(terms, dict):
        terms = {}

    def add_list(values: Any, group: str, base: str) -> None:
        if not isinstance(values, list):
            return
        for i, value in enumerate(values):
            if isinstance(value, str) and value:
                entries.append(Entry(
                    id=f"system-{filename}-{group}-{i}",
                    original=value,
                    path=join_index(base, i),
                    file=filename,
                    context=f"System {group}",
                ))

    for group in SYSTEM_TERM_LISTS:
        add_list(terms.get(group), group, f"terms.{group}")

    messages = terms.get("messages")
    if isinstance(messages, dict):
        for key, value in messages.items():
            if isinstance(value, str) and value:
                entries.append(Entry(
                    id=f"system-{filename}-messages-{key}",
                    original=value,
                    path=join_key("terms.messages", key),
                    file=filename,
                    context="System message",
                ))

    for name in SYSTEM_TYPE_LISTS:
        add_list(data.get(name), name, name)

    return entries


def _extract_troops(filename: str, data: list) -> list[Entry]:
    entries: list[Entry] = []
    for t_idx, troop in _records(data):
        name = troop.get("name")
        if isinstance(name, str) and name:
            entries.append(Entry(
                id=f"troop-{filename}-{t_idx}-name",
                original=name,
                path=f"[{t_idx}].name",
                file=filename,
                context="Troop name",
            ))
        pages = troop.get("pages")
        if not isinstance(pages, list):
            continue
        for p_idx, page in enumerate(pages):
            for c_idx, cmd in _commands(page):
                text = _show_text(cmd)
                if text is None:
                    continue
                entries.append(Entry(
                    id=f"troop-{filename}-{t_idx}-{p_idx}-{c_idx}",
                    original=text,
                    path=f"[{t_idx}].pages[{p_idx}].list[{c_idx}].parameters[0]",
                    file=filename,
                    context=f"Troop: {name or 'Unnamed'}",
                ))
    return entries


def extract_rpgmaker(filename: str, data: Any) -> list[Entry]:
    """Extract entries from an already-decoded RPG Maker value."""
    shape = detect_shape(data)
    if shape is None:
        logger.debug("%s: no known RPG Maker shape", filename)
        return []
    if shape == RpgShape.MAP:
        return _extract_map(filename, data)
    if shape == RpgShape.COMMON_EVENTS:
        return _extract_common_events(filename, data)
    if shape == RpgShape.ACTORS:
        return _extract_fields(filename, data, ACTOR_FIELDS, "actor")
    if shape == RpgShape.SYSTEM:
        return _extract_system(filename, data)
    if shape == RpgShape.ENTITY_TABLE:
        return _extract_fields(filename, data, ENTITY_FIELDS, "data")
    return _extract_troops(filename, data)


def parse_rpgmaker(filename: str, content: str, data: Any = None) -> list[Entry]:
    """Parse an RPG Maker file. Any failure yields zero entries for this file."""
    try:
        if data is None:
            data = json.loads(content)
        return extract_rpgmaker(filename, data)
    except Exception:
        logger.exception("Failed to parse RPG Maker file %s", filename)
        return []
