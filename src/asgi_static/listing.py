# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Directory listing page.

list_directory() reads the entries of a directory; render_listing() turns
them into a complete HTML page. The page is built in memory before anything
is sent, so a read error never produces a partial listing.

Entry order is whatever ``os.scandir`` yields. It depends on the filesystem
and is not guaranteed to be sorted or stable across calls.

Page structure::

    <header>/srv/public/docs</header>
    <ul>
      <li><a class="dir" href="img/">img/</a></li>
      <li><a class="file" href="a.txt">a.txt</a><span>1.50KB</span></li>
    </ul>
"""

from __future__ import annotations

import os
from html import escape
from string import Template
from typing import NamedTuple
from urllib.parse import quote

__all__ = [
    "DirectoryEntry",
    "format_size",
    "list_directory",
    "render_listing",
]

_UNITS = (
    (1 << 60, "EB"),
    (1 << 50, "PB"),
    (1 << 40, "TB"),
    (1 << 30, "GB"),
    (1 << 20, "MB"),
    (1 << 10, "KB"),
)

LISTING_HTML = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta http-equiv="X-UA-Compatible" content="ie=edge">
    <title>${name}</title>
    <style>
        body { font-family: Menlo, Consolas, monospace; padding: 48px; }
        header { padding: 4px 16px; font-size: 24px; }
        ul {
            list-style-type: none;
            margin: 0;
            padding: 20px 0 0 0;
            display: flex;
            flex-wrap: wrap;
        }
        li { width: 300px; padding: 16px; }
        li a {
            display: block;
            overflow: hidden;
            white-space: nowrap;
            text-overflow: ellipsis;
            text-decoration: none;
            transition: opacity 0.25s;
        }
        li span { color: #707070; font-size: 12px; }
        li a:hover { opacity: 0.50; }
        .dir { color: #E91E63; }
        .file { color: #673AB7; }
    </style>
</head>
<body>
    <header>
        ${name}
    </header>
    <ul>
${items}
    </ul>
</body>
</html>
""")

DIR_ITEM_HTML = """        <li>
            <a class="dir" href="{href}">{name}</a>
        </li>"""

FILE_ITEM_HTML = """        <li>
            <a class="file" href="{href}">{name}</a>
            <span>{size}</span>
        </li>"""


class DirectoryEntry(NamedTuple):
    """One listed child of a directory. ``size`` is "" for directories."""

    name: str
    is_dir: bool
    size: str


def format_size(size: int) -> str:
    """Format a byte count with binary (1024-based) units.

    >>> format_size(0)
    '0'
    >>> format_size(512)
    '512B'
    >>> format_size(1536)
    '1.50KB'
    """
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    if size == 0:
        return "0"
    for unit, suffix in _UNITS:
        if size >= unit:
            return f"{size / unit:.2f}{suffix}"
    return f"{size}B"


def list_directory(path: str) -> list[DirectoryEntry]:
    """Return the entries of ``path`` in filesystem order.

    Symlinks are followed for the directory test and the size; a dangling
    symlink is listed as a file of size 0.

    Raises:
        OSError: If the directory cannot be opened or read.
    """
    entries: list[DirectoryEntry] = []
    with os.scandir(path) as it:
        for entry in it:
            if entry.is_dir():
                entries.append(DirectoryEntry(entry.name, True, ""))
                continue
            try:
                size = entry.stat().st_size
            except FileNotFoundError:
                size = 0
            entries.append(DirectoryEntry(entry.name, False, format_size(size)))
    return entries


def _href(name: str) -> str:
    return escape(quote(name, encoding="utf-8", errors="surrogateescape"))


def _text(name: str) -> str:
    # Undecodable file names are shown with replacement characters
    return escape(name.encode("utf-8", "surrogateescape").decode("utf-8", "replace"))


def render_listing(path: str) -> str:
    """Render the HTML listing page for directory ``path``.

    Raises:
        OSError: Propagated from list_directory(); nothing is rendered.
    """
    items = []
    for entry in list_directory(path):
        if entry.is_dir:
            name = entry.name + "/"
            items.append(DIR_ITEM_HTML.format(href=_href(name), name=_text(name)))
        else:
            items.append(
                FILE_ITEM_HTML.format(
                    href=_href(entry.name), name=_text(entry.name), size=escape(entry.size)
                )
            )
    return LISTING_HTML.substitute(name=_text(path), items="\n".join(items))
