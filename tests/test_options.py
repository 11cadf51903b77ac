import pytest

from dnetkit.options import (
    OptionList,
    get_metadata,
    read_cfg,
    read_data_cfg,
    read_lines,
)


def test_read_option_and_find():
    opts = OptionList()
    assert opts.read_option("batch=64")
    assert opts.find("batch") == "64"
    assert opts.find("missing") is None


def test_trailing_equals_rejected():
    opts = OptionList()
    assert opts.read_option("key=") is False
    assert len(opts) == 0


def test_line_without_equals_has_no_value():
    opts = OptionList()
    assert opts.read_option("flag")
    assert opts.find_str("flag", "fallback") == "fallback"


def test_value_keeps_later_equals():
    opts = OptionList()
    opts.read_option("a=b=c")
    assert opts.find("a") == "b=c"


def test_first_match_wins():
    opts = OptionList()
    opts.insert("k", "first")
    opts.insert("k", "second")
    assert opts.find("k") == "first"


def test_numeric_lookups():
    opts = OptionList()
    opts.insert("n", "12abc")
    opts.insert("f", "0.5")
    assert opts.find_int("n", 0) == 12
    assert opts.find_float("f", 1.0) == 0.5
    assert opts.find_int_quiet("none", 7) == 7
    assert opts.find_float_quiet("none", 2.5) == 2.5


def test_default_warns(capsys):
    opts = OptionList()
    assert opts.find_int("classes", 2) == 2
    assert "classes: Using default '2'" in capsys.readouterr().err


def test_unused_tracking():
    opts = OptionList()
    opts.insert("a", "1")
    opts.insert("b", "2")
    opts.find("a")
    unused = opts.unused()
    assert [o.key for o in unused] == ["b"]


def test_read_cfg_sections(tmp_path):
    path = tmp_path / "net.cfg"
    path.write_text("[net]\nbatch = 32\n# comment\n\n[convolutional]\nfilters=16\n;x\n")
    sections = read_cfg(path)
    assert [s.type for s in sections] == ["[net]", "[convolutional]"]
    assert sections[0].options.find("batch") == "32"
    assert sections[1].options.find_int("filters", 0) == 16


def test_read_cfg_bad_line_reported(tmp_path, capsys):
    path = tmp_path / "net.cfg"
    path.write_text("[net]\nwidth=\n")
    sections = read_cfg(path)
    assert len(sections[0].options) == 0
    assert "line 2" in capsys.readouterr().err


def test_read_cfg_option_before_section(tmp_path):
    path = tmp_path / "net.cfg"
    path.write_text("batch=1\n[net]\n")
    with pytest.raises(ValueError):
        read_cfg(path)


def test_read_cfg_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_cfg(tmp_path / "nope.cfg")


def test_read_data_cfg(tmp_path):
    path = tmp_path / "d.data"
    path.write_text("classes=10\n#c\ntrain=list.txt\n")
    opts = read_data_cfg(path)
    assert opts.find_str("train") == "list.txt"
    assert opts.find_int("classes", 0) == 10


def test_read_lines(tmp_path):
    path = tmp_path / "l.txt"
    path.write_text("one\r\ntwo\nthree")
    assert read_lines(path) == ["one", "two", "three"]


def test_get_metadata(tmp_path):
    names = tmp_path / "names.txt"
    names.write_text("cat\ndog\n")
    data = tmp_path / "d.data"
    data.write_text(f"classes=2\nnames={names}\n")
    meta = get_metadata(data)
    assert meta.classes == 2
    assert meta.names == ["cat", "dog"]


def test_get_metadata_uses_labels_and_default(tmp_path, capsys):
    names = tmp_path / "labels.txt"
    names.write_text("x\n")
    data = tmp_path / "d.data"
    data.write_text(f"labels={names}\n")
    meta = get_metadata(data)
    assert meta.names == ["x"]
    assert meta.classes == 2
    assert "classes: Using default" in capsys.readouterr().err