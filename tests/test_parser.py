"""Tests for reading (reconciliation), writing and file handling."""

import os
import warnings

import pytest

from pyini import IniDocument, IniParser, IniSyntaxError, TokenType
from pyini.parser import _Reconciler
from pyini.reader import Reader


def loads(text, **kwargs):
    return IniParser.readstream(text, **kwargs)


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

def test_list_accumulation_order():
    doc = loads("[keys]\nauth < aaa\nauth < bbb\nauth < ccc\n")
    assert doc.section("keys").getlist("auth") == ["aaa", "bbb", "ccc"]

def test_keys_and_values_are_trimmed():
    doc = loads("  width   =   320  \n")
    assert dict(doc.header) == {"width": "320"}

def test_global_then_sections():
    doc = loads("top = 1\n[a]\nx = 2\n[b]\ny = 3\n")
    assert list(doc) == ["", "a", "b"]
    assert doc.header["top"] == "1"
    assert doc["a"]["x"] == "2"
    assert doc["b"]["y"] == "3"

def test_section_reopened_keeps_keys():
    doc = loads("[a]\nx = 1\n[b]\n[a]\ny = 2\n")
    assert dict(doc["a"]) == {"x": "1", "y": "2"}

def test_section_name_is_trimmed():
    doc = loads("[ spaced ]\na = 1")
    assert doc["spaced"]["a"] == "1"

def test_empty_section_name_is_global():
    doc = loads("[s]\n[]\na = 1")
    assert doc.header["a"] == "1"
    assert len(doc["s"]) == 0

def test_key_without_value():
    doc = loads("a =")
    assert doc.header["a"] == ""

def test_list_key_without_value():
    doc = loads("a <\n")
    assert doc.header["a"] == [""]

def test_scalar_overwrite():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        doc = loads("k = a\nk = b\n")
    assert doc.header["k"] == "b"

def test_comments_are_skipped():
    doc = loads("; top\na = 1\n; b = 2\n[s]\n  ; indented\nc = 3\n")
    assert dict(doc.header) == {"a": "1"}
    assert dict(doc["s"]) == {"c": "3"}

def test_inline_semicolon_belongs_to_value():
    doc = loads("a = 1 ; not a comment\n")
    assert doc.header["a"] == "1 ; not a comment"

def test_unicode_content():
    doc = loads("[設定]\n名前 = 値\n".encode())
    assert doc["設定"]["名前"] == "値"

def test_loading_twice_merges():
    doc = IniDocument()
    doc.loads("a = 1\n[s]\nl < x\n")
    doc.loads("b = 2\n[s]\nl < y\n")
    assert dict(doc.header) == {"a": "1", "b": "2"}
    assert doc["s"]["l"] == ["x", "y"]

def test_value_without_pending_key_is_dropped():
    doc = IniDocument()
    rec = _Reconciler(Reader(), doc, strict=False)
    rec(TokenType.VALUE, " orphan ")
    assert len(doc.header) == 0
    rec(TokenType.KEY, "k ")
    rec(TokenType.VALUE, " v ")
    rec(TokenType.VALUE, " again ")
    assert doc.header["k"] == "v"


# ---------------------------------------------------------------------------
# Mixed `=` / `<` forms: last form wins
# ---------------------------------------------------------------------------

def test_list_after_scalar_replaces_it():
    with pytest.warns(UserWarning, match='"k" switched to "<"'):
        doc = loads("k = a\nk < b\nk < c\n")
    assert doc.header["k"] == ["b", "c"]

def test_scalar_after_list_replaces_it():
    with pytest.warns(UserWarning, match='"k" switched to "="'):
        doc = loads("[s]\nk < a\nk < b\nk = c\n")
    assert doc["s"]["k"] == "c"

def test_mixed_warning_names_line():
    with pytest.warns(UserWarning, match="line 3"):
        loads("k < a\n\nk = b\n")

def test_mixed_forms_across_loads():
    doc = IniDocument()
    doc.header["k"] = "scalar"
    with pytest.warns(UserWarning):
        doc.loads("k < item")
    assert doc.header["k"] == ["item"]


# ---------------------------------------------------------------------------
# Malformed input: lenient and strict
# ---------------------------------------------------------------------------

def test_reading_stops_at_garbage():
    doc = loads("a = 1\n= oops\nb = 2\n")
    assert dict(doc.header) == {"a": "1"}

def test_strict_reports_garbage_location():
    with pytest.raises(IniSyntaxError) as exc:
        loads("a = 1\n= oops\nb = 2\n", strict=True)
    assert (exc.value.line, exc.value.column) == (2, 1)
    assert isinstance(exc.value, ValueError)

def test_trailing_line_without_delimiter():
    assert dict(loads("a = 1\ntrailing\n").header) == {"a": "1"}
    with pytest.raises(IniSyntaxError) as exc:
        loads("a = 1\n  trailing\n", strict=True)
    assert (exc.value.line, exc.value.column) == (2, 3)

def test_key_spanning_lines():
    assert loads("junk\nb = 1").header["junk\nb"] == "1"
    with pytest.raises(IniSyntaxError, match="line 1, column 1"):
        loads("junk\nb = 1", strict=True)

def test_unterminated_section():
    doc = loads("x = 1\n[oops\na = 1")
    assert list(doc) == [""]
    assert dict(doc.header) == {"x": "1"}
    with pytest.raises(IniSyntaxError) as exc:
        loads("x = 1\n[oops\na = 1", strict=True)
    assert exc.value.line == 2

def test_strict_accepts_clean_input():
    doc = loads("; c\na = 1\n\n[s]\nb < 2\n\n\n", strict=True)
    assert doc["s"]["b"] == ["2"]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def test_dumps_layout():
    doc = IniDocument()
    doc.section("s").setlist("auth", "a", "b")
    doc.section("s").set("x", 1)
    doc.header["k"] = "v"
    assert doc.dumps() == "k = v\n\n[s]\nauth < a\nauth < b\nx = 1\n\n"

def test_dumps_empty_document():
    assert IniDocument().dumps() == "\n"

def test_dumps_blank_lines():
    doc = IniDocument()
    doc.section("s")["a"] = "1"
    assert doc.dumps(blank_lines=2) == "\n\n[s]\na = 1\n\n\n"

def test_dumps_global_first_even_if_recreated():
    doc = IniDocument()
    del doc[""]
    doc.section("s")["a"] = "1"
    doc.header["g"] = "2"
    assert doc.dumps().startswith("g = 2\n\n[s]\n")

def test_dumps_then_loads():
    doc = IniDocument()
    doc.header["url"] = "http://www.server.com/page?var=value"
    doc.section("keys").setlist("auth", "x", "y")
    again = IniDocument().loads(doc.dumps())
    assert again.header["url"] == "http://www.server.com/page?var=value"
    assert again["keys"]["auth"] == ["x", "y"]


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def test_roundtrip(tmp_path):
    path = tmp_path / "test.ini"
    a = IniDocument()
    a.header["randomkey"] = "abc def"
    gfx = a.section("graphics")
    gfx.set("width", 320)
    gfx.set("height", 240)
    gfx.set("depth", 32)
    snd = a.section("sound")
    snd.set("volume-master", 100)
    snd.set("volume-left", 0.6)
    snd.set("volume-right", 0.65)
    a.section("misc")["url"] = "http://www.server.com/page?var=value"
    a.section("keys").setlist("auth", "aaa", "bbb", "ccc")
    a.save(path)

    b = IniDocument().load(path)
    assert list(b) == list(a)
    for name, sa in a.items():
        sb = b[name]
        assert list(sb) == list(sa)
        for key, va in sa.items():
            vb = sb[key]
            if isinstance(va, list):
                assert vb == va
            else:
                assert vb.casefold() == va.casefold()
    assert b.section("graphics").getint("width", 0, bits=32) == 320
    assert b.section("sound").getfloat("volume-left") == 0.6

def test_empty_list_is_lost_on_roundtrip(tmp_path):
    path = tmp_path / "test.ini"
    a = IniDocument()
    a.section("s").setlist("empty")
    a.section("s")["kept"] = "1"
    a.save(path)
    b = IniDocument().load(path)
    assert "empty" not in b["s"]
    assert b["s"]["kept"] == "1"

@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_saved_file_is_owner_only(tmp_path):
    path = tmp_path / "secret.ini"
    IniDocument().save(path)
    assert os.stat(path).st_mode & 0o777 == 0o600

def test_save_overwrites(tmp_path):
    path = tmp_path / "test.ini"
    path.write_text("old = content that is rather long\n" * 10)
    doc = IniDocument()
    doc.header["a"] = "1"
    doc.save(path)
    assert path.read_text() == "a = 1\n\n"

def test_load_missing_file_raises(tmp_path):
    doc = IniDocument()
    with pytest.raises(FileNotFoundError):
        doc.load(tmp_path / "nope.ini")

def test_save_to_missing_dir_raises(tmp_path):
    with pytest.raises(OSError):
        IniDocument().save(tmp_path / "no" / "such" / "dir.ini")

def test_load_strips_bom(tmp_path):
    path = tmp_path / "bom.ini"
    path.write_bytes(b"\xef\xbb\xbfa = 1\n")
    assert IniDocument().load(path).header["a"] == "1"

def test_load_with_explicit_encoding(tmp_path):
    path = tmp_path / "latin.ini"
    path.write_bytes("name = café\n".encode("latin-1"))
    doc = IniParser(path, "latin-1").read()
    assert doc.header["name"] == "café"

def test_load_non_utf8_does_not_raise(tmp_path):
    path = tmp_path / "latin.ini"
    path.write_bytes("name = café\n".encode("latin-1"))
    doc = IniDocument().load(path)
    assert doc.header["name"].startswith("caf")

def test_load_strict_from_file(tmp_path):
    path = tmp_path / "bad.ini"
    path.write_text("a = 1\n= oops\n")
    with pytest.raises(IniSyntaxError):
        IniDocument().load(path, strict=True)

def test_save_with_encoding(tmp_path):
    path = tmp_path / "gbk.ini"
    doc = IniDocument()
    doc.header["名前"] = "値"
    doc.save(path, encoding="gbk")
    assert path.read_bytes() == "名前 = 値\n\n".encode("gbk")
    assert IniParser(path, "gbk").read().header["名前"] == "値"

def test_parser_str(tmp_path):
    assert str(IniParser("x.ini", "gbk")) == "INI file: x.ini(gbk)"
    assert IniParser(tmp_path / "y.ini").filename == str(tmp_path / "y.ini")
