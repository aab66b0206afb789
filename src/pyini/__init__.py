# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2026/10/19 14:00:03
# @Author : Kariko Lin

"""Reads and writes `.ini` files, with `key < value` lists.

    ```python
    doc = IniDocument().load('myfile.ini')
    gfx = doc.section('graphics')
    width = gfx.getint('width', 640)
    auth = doc.section('keys').getlist('auth')
    ```
"""

import logging

from .model import IniDocument, IniSection, IniValue
from .parser import IniError, IniParser, IniSyntaxError
from .reader import Reader, TokenType, tokenize

__all__ = [
    'IniDocument', 'IniSection', 'IniValue',
    'IniParser', 'IniError', 'IniSyntaxError',
    'Reader', 'TokenType', 'tokenize'
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
