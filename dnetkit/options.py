"""Key/value option lists and the sectioned configuration file format."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)", re.IGNORECASE
)


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group()) if match else 0


def _atof(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group()) if match else 0.0


def _warn(message: str) -> None:
    print(message, file=sys.stderr)


def _strip(line: str) -> str:
    return "".join(line.split())


@dataclass
class Option:
    """One ``key=value`` entry; ``used`` records whether it was looked up."""

    key: str
    value: Optional[str]
    used: bool = False


@dataclass
class OptionList:
    """An ordered list of options looked up by key."""

    options: list = field(default_factory=list)

    def __iter__(self) -> Iterator[Option]:
        return iter(self.options)

    def __len__(self) -> int:
        return len(self.options)

    def read_option(self, line: str) -> bool:
        """Parse ``key=value`` and insert it; a trailing ``=`` is rejected."""
        key, sep, value = line.partition("=")
        if sep and not value:
            return False
        self.insert(key, value if sep else None)
        return True

    def insert(self, key: str, value: Optional[str]) -> None:
        self.options.append(Option(key, value))

    def find(self, key: str) -> Optional[str]:
        """Value of the first option named ``key``, marking it used."""
        for option in self.options:
            if option.key == key:
                option.used = True
                return option.value
        return None

    def find_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.find(key)
        if value is not None:
            return value
        if default is not None:
            _warn(f"{key}: Using default '{default}'")
        return default

    def find_int(self, key: str, default: int) -> int:
        value = self.find(key)
        if value is not None:
            return _atoi(value)
        _warn(f"{key}: Using default '{default}'")
        return default

    def find_int_quiet(self, key: str, default: int) -> int:
        value = self.find(key)
        return _atoi(value) if value is not None else default

    def find_float(self, key: str, default: float) -> float:
        value = self.find(key)
        if value is not None:
            return _atof(value)
        _warn(f"{key}: Using default '{default:f}'")
        return default

    def find_float_quiet(self, key: str, default: float) -> float:
        value = self.find(key)
        return _atof(value) if value is not None else default

    def unused(self) -> list:
        """Report and return the options that were never looked up."""
        unused = [o for o in self.options if not o.used]
        for option in unused:
            _warn(f"Unused field: '{option.key} = {option.value}'")
        return unused


@dataclass
class Section:
    """A ``[type]`` block of a configuration file and its options."""

    type: str
    options: OptionList = field(default_factory=OptionList)


@dataclass
class Metadata:
    """Class count and class names described by a data configuration file."""

    classes: int = 0
    names: Optional[list] = None


def read_lines(path) -> list:
    """Lines of a text file without their line endings."""
    with open(path) as handle:
        return [line.rstrip("\r\n") for line in handle]


def _report_bad_line(number: int, line: str) -> None:
    _warn(f"Config file error line {number}, could parse: {line}")


def read_data_cfg(path) -> OptionList:
    """Read a flat ``key=value`` file, skipping blanks and comments."""
    options = OptionList()
    for number, raw in enumerate(read_lines(path), start=1):
        line = _strip(raw)
        if not line or line[0] in "#;":
            continue
        if not options.read_option(line):
            _report_bad_line(number, line)
    return options


def read_cfg(path) -> list:
    """Read a sectioned configuration file into a list of sections."""
    sections: list = []
    for number, raw in enumerate(read_lines(path), start=1):
        line = _strip(raw)
        if not line or line[0] in "#;":
            continue
        if line[0] == "[":
            sections.append(Section(line))
            continue
        if not sections:
            raise ValueError(f"option outside any section on line {number}: {line}")
        if not sections[-1].options.read_option(line):
            _report_bad_line(number, line)
    return sections


def get_metadata(path) -> Metadata:
    """Read class count and names from a data configuration file."""
    options = read_data_cfg(path)
    meta = Metadata()
    name_list = options.find_str("names") or options.find_str("labels")
    if not name_list:
        _warn("No names or labels found")
    else:
        meta.names = read_lines(Path(name_list))
    meta.classes = options.find_int("classes", 2)
    return meta