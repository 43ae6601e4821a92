"""Tests for reinjecting translations into the original file content."""

import json

import pytest

from gamescript.core.constants import FileFormat
from gamescript.core.models import Entry
from gamescript.core.paths import PatchResult
from gamescript.parsers import parse_file
from gamescript.translation.applier import apply_translations, apply_with_diagnostics


def _translate_all(entries, fn=lambda s: f"<{s}>"):
    for e in entries:
        e.translated = fn(e.original)
    return entries


class TestJson:
    def test_map_roundtrip(self, map_data):
        content = json.dumps(map_data)
        detection, entries = parse_file("Map001.json", content)
        _translate_all(entries)
        out = json.loads(apply_translations(content, entries, detection.format))

        guard = out["events"][1]["pages"][0]["list"]
        assert guard[1]["parameters"][0] == "<Halt! Who goes there?>"
        assert guard[3]["parameters"][0] == ["<Friend>", "<Foe>", ""]
        # Non-text commands untouched
        assert guard[0] == map_data["events"][1]["pages"][0]["list"][0]
        assert out["width"] == 17

    def test_database_leading_index_paths(self, items_data):
        content = json.dumps(items_data)
        detection, entries = parse_file("Items.json", content)
        _translate_all(entries)
        out = json.loads(apply_translations(content, entries, detection.format))
        assert out[1]["name"] == "<Potion>"
        assert out[1]["description"] == "<Restores 500 HP.>"
        assert out[1]["price"] == 50
        assert out[0] is None

    def test_output_is_two_space_indented_utf8(self):
        content = '{"a":"x"}'
        entries = [Entry(id="1", original="x", path="a", translated="ñ")]
        assert apply_translations(content, entries, FileFormat.JSON) == '{\n  "a": "ñ"\n}'

    def test_nothing_applied_returns_input_verbatim(self):
        content = '{"a":"x"}'
        entries = [Entry(id="1", original="x", path="a")]
        assert apply_translations(content, entries, FileFormat.JSON) == content

    def test_unresolvable_path_is_skipped(self):
        content = '{"a": "x", "n": 1}'
        entries = [
            Entry(id="1", original="x", path="a", translated="y"),
            Entry(id="2", original="?", path="b.c", translated="z"),
            Entry(id="3", original="1", path="n", translated="one"),
        ]
        report = apply_with_diagnostics(content, entries, FileFormat.JSON)
        assert json.loads(report.text) == {"a": "y", "n": 1}
        assert report.results == {
            "1": PatchResult.APPLIED,
            "2": PatchResult.PATH_NOT_FOUND,
            "3": PatchResult.NOT_A_STRING,
        }
        assert report.missed == ["2", "3"]

    def test_flat_dotted_keys_written_back(self):
        content = json.dumps({"menu.start": "Start", "menu.quit": "Quit"})
        detection, entries = parse_file("en.json", content)
        _translate_all(entries)
        report = apply_with_diagnostics(content, entries, detection.format)
        assert json.loads(report.text) == {"menu.start": "<Start>", "menu.quit": "<Quit>"}
        assert report.missed == []

    def test_dotted_key_does_not_overwrite_nested_twin(self):
        content = json.dumps({"a.b": "x", "a": {"b": "y"}})
        detection, entries = parse_file("en.json", content)
        for e in entries:
            if e.original == "x":
                e.translated = "equis"
        out = json.loads(apply_translations(content, entries, detection.format))
        assert out == {"a.b": "equis", "a": {"b": "y"}}

    def test_unparsable_content_kept(self):
        entries = [Entry(id="1", original="x", path="a", translated="y")]
        report = apply_with_diagnostics("{nope", entries, FileFormat.JSON)
        assert report.text == "{nope"
        assert report.applied == 0


class TestLineFormats:
    def test_kirikiri(self, kirikiri_text):
        detection, entries = parse_file("scene.ks", kirikiri_text)
        entries[0].translated = "La lluvia no paraba.[l][r]"
        out = apply_translations(kirikiri_text, entries, detection.format)
        lines = out.split("\n")
        assert lines[4] == "La lluvia no paraba.[l][r]"
        assert lines[6] == kirikiri_text.split("\n")[6]
        assert lines[:4] == kirikiri_text.split("\n")[:4]

    def test_kirikiri_crlf_preserved(self):
        content = "*top\r\nHello.\r\n[p]\r\n"
        detection, entries = parse_file("a.ks", content)
        _translate_all(entries)
        assert apply_translations(content, entries, detection.format) == "*top\r\n<Hello.>\r\n[p]\r\n"

    def test_renpy_replaces_only_quoted_text(self, renpy_text):
        detection, entries = parse_file("script.rpy", renpy_text)
        entries[0].translated = "Hola"
        entries[1].translated = 'Dijo "adiós"'
        out = apply_translations(renpy_text, entries, detection.format).split("\n")
        assert out[2] == '    e "Hola"'
        assert out[3] == '    "Dijo \\"adiós\\""'
        assert out[4] == '    e ""'

    def test_renpy_already_escaped_quotes_kept(self):
        content = 'e "x"\n'
        entries = [Entry(id="1", original="x", path="line-0", translated=r'a \"b\"')]
        assert apply_translations(content, entries, FileFormat.RENPY) == 'e "a \\"b\\""\n'

    def test_line_out_of_range(self):
        entries = [Entry(id="1", original="x", path="line-99", translated="y")]
        report = apply_with_diagnostics("a\nb", entries, FileFormat.KIRIKIRI)
        assert report.text == "a\nb"
        assert report.results["1"] == PatchResult.PATH_NOT_FOUND

    def test_renpy_trailing_backslash_keeps_line_parseable(self):
        content = 'e "x"\ne "y"\n'
        entries = [Entry(id="1", original="x", path="line-0", translated="C:\\saves\\")]
        out = apply_translations(content, entries, FileFormat.RENPY)
        assert out == 'e "C:\\saves\\\\"\ne "y"\n'
        _, reparsed = parse_file("script.rpy", out)
        assert [e.original for e in reparsed] == ["C:\\saves\\\\", "y"]

    def test_renpy_escaped_backslash_before_quote(self):
        entries = [Entry(id="1", original="x", path="line-0", translated='a \\\\"b')]
        out = apply_translations('e "x"\n', entries, FileFormat.RENPY)
        assert out == 'e "a \\\\\\"b"\n'
        _, reparsed = parse_file("script.rpy", out)
        assert len(reparsed) == 1

    def test_renpy_line_no_longer_dialogue(self):
        entries = [Entry(id="1", original="x", path="line-0", translated="y")]
        report = apply_with_diagnostics("jump end\n", entries, FileFormat.RENPY)
        assert report.text == "jump end\n"
        assert report.missed == ["1"]


class TestCsv:
    def test_cell_replaced_with_surrounding_whitespace(self, csv_text):
        detection, entries = parse_file("lines.csv", csv_text)
        by_path = {e.path: e for e in entries}
        by_path["row-1-col-1"].translated = "Abre la puerta"
        by_path["row-1-col-2"].translated = "pregunta antes"
        out = apply_translations(csv_text, entries, detection.format)
        assert out.split("\n")[1] == "1,Abre la puerta, pregunta antes "
        assert out.split("\n")[0] == "id,text,notes"

    def test_crlf(self):
        content = "a,b\r\nc,d\r\n"
        detection, entries = parse_file("x.csv", content)
        _translate_all(entries)
        assert apply_translations(content, entries, detection.format) == "<a>,<b>\r\n<c>,<d>\r\n"

    def test_missing_column(self):
        entries = [Entry(id="1", original="x", path="row-0-col-5", translated="y")]
        report = apply_with_diagnostics("a,b", entries, FileFormat.CSV)
        assert report.text == "a,b"
        assert report.results["1"] == PatchResult.PATH_NOT_FOUND


class TestSrt:
    def test_text_lines_replaced(self, srt_text):
        detection, entries = parse_file("movie.srt", srt_text)
        entries[0].translated = "Hola."
        entries[1].translated = "Dos líneas\nde diálogo."
        out = apply_translations(srt_text, entries, detection.format)
        assert out == (
            "1\n00:00:01,000 --> 00:00:02,000\nHola.\n\n"
            "2\n00:00:03,000 --> 00:00:05,000\nDos líneas\nde diálogo.\n"
        )

    def test_crlf_block(self, srt_text):
        content = srt_text.replace("\n", "\r\n")
        detection, entries = parse_file("movie.srt", content)
        entries[1].translated = "A\nB"
        out = apply_translations(content, entries, detection.format)
        assert out.endswith("00:00:03,000 --> 00:00:05,000\r\nA\r\nB\r\n")
        assert out.startswith("1\r\n00:00:01,000 --> 00:00:02,000\r\nHello there.\r\n\r\n")


class TestRaw:
    def test_full_overwrite(self):
        detection, entries = parse_file("notes.txt", "hello\n")
        entries[0].translated = "hola\n"
        assert apply_translations("hello\n", entries, detection.format) == "hola\n"

    def test_raw_entry_overrides_any_format(self):
        entries = [Entry(id="r", original="{", path="raw", translated="replaced")]
        assert apply_translations("{", entries, FileFormat.JSON) == "replaced"


class TestInvariants:
    @pytest.mark.parametrize("filename,fixture", [
        ("Map001.json", "map_data"),
        ("scene.ks", "kirikiri_text"),
        ("script.rpy", "renpy_text"),
        ("lines.csv", "csv_text"),
        ("movie.srt", "srt_text"),
    ])
    def test_no_translations_is_identity(self, filename, fixture, request):
        value = request.getfixturevalue(fixture)
        content = value if isinstance(value, str) else json.dumps(value)
        detection, entries = parse_file(filename, content)
        assert apply_translations(content, entries, detection.format) == content

    @pytest.mark.parametrize("filename,fixture", [
        ("scene.ks", "kirikiri_text"),
        ("script.rpy", "renpy_text"),
        ("lines.csv", "csv_text"),
        ("movie.srt", "srt_text"),
    ])
    def test_translating_to_original_is_identity(self, filename, fixture, request):
        content = request.getfixturevalue(fixture)
        detection, entries = parse_file(filename, content)
        _translate_all(entries, fn=lambda s: s)
        assert apply_translations(content, entries, detection.format) == content

    @pytest.mark.parametrize("filename,fixture", [
        ("Map001.json", "map_data"),
        ("scene.ks", "kirikiri_text"),
        ("script.rpy", "renpy_text"),
        ("lines.csv", "csv_text"),
        ("movie.srt", "srt_text"),
    ])
    def test_reapplying_to_own_output_is_stable(self, filename, fixture, request):
        value = request.getfixturevalue(fixture)
        content = value if isinstance(value, str) else json.dumps(value)
        detection, entries = parse_file(filename, content)
        _translate_all(entries)
        once = apply_translations(content, entries, detection.format)
        assert once != content
        assert apply_translations(once, entries, detection.format) == once

    def test_untranslated_reported(self):
        entries = [Entry(id="1", original="x", path="line-0")]
        report = apply_with_diagnostics("x", entries, FileFormat.KIRIKIRI)
        assert report.results["1"] == PatchResult.UNTRANSLATED
        assert report.missed == []
