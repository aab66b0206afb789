# -*- encoding: utf-8 -*-
# @File   : bench.py
# @Time   : 2026/10/19 16:20:45
# @Author : Kariko Lin

"""Compares the lexer based loader with a plain `readline()` one.

    python -m pyini.bench test.ini --limit 10000

The line loader is what this package used to do. It is kept here only
as a baseline, since it ignores keys or sections that span lines.
"""

import argparse
import logging
import sys
from io import TextIOBase
from os import PathLike
from time import perf_counter

from .model import IniDocument
from .parser import IniParser

__all__ = ['linewise_load', 'run', 'main']


def linewise_load(
    buf: TextIOBase, ins: IniDocument | None = None
) -> IniDocument:
    if ins is None:
        ins = IniDocument()
    this_sect = ins.header
    while i := buf.readline():
        i = i.strip()
        if not i or i[0] == ';':
            continue
        if i[0] == '[':
            if (end := i.find(']')) > 0:
                this_sect = ins.section(i[1:end].strip())
            continue
        delims = [p for p in (i.find('='), i.find('<')) if p > 0]
        if not delims:
            continue
        pos = min(delims)
        key, val = i[:pos].strip(), i[pos + 1:].strip()
        if i[pos] == '<':
            this_sect.append(key, val)
        else:
            this_sect[key] = val
    return ins


def run(
    filename: str | PathLike[str], limit: int = 1000
) -> dict[str, float]:
    """Load `filename` `limit` times with each loader, in seconds."""
    timings: dict[str, float] = {}

    start = perf_counter()
    for _ in range(limit):
        IniParser(filename).read()
    timings['scanner'] = perf_counter() - start

    start = perf_counter()
    for _ in range(limit):
        with open(filename, 'r', encoding='utf-8', errors='replace') as fp:
            linewise_load(fp)
    timings['linewise'] = perf_counter() - start
    return timings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog='pyini-bench', description='Time INI loading strategies')
    parser.add_argument('file', type=str, help='INI file to load')
    parser.add_argument(
        '--limit', default=1000, type=int, help='Loads per strategy')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO,
                        format='[%(asctime)s] %(levelname)s: %(message)s')
    if args.limit < 1:
        parser.error('--limit should be positive')
    try:
        timings = run(args.file, args.limit)
    except OSError as e:
        logging.error('Unable to benchmark: %s', e)
        return 1
    for name, secs in timings.items():
        logging.info('%-9s %8.3fs (%.1f us/load)',
                     name, secs, secs / args.limit * 1e6)
    return 0


if __name__ == '__main__':
    sys.exit(main())
