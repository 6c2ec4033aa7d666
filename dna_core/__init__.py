# -*- coding: utf-8 -*-
"""Parsing and cross-referencing for decompiled game data dumps."""

__version__ = "0.3.0"
