# -*- coding: utf-8 -*-
"""CSV → WordPress bulk post synchronizer."""

__version__ = "0.3.0"
