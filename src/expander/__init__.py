"""Expander - keep generated text inside document markers in sync.

Documents embed regions such as::

    <!-- expand: today -->2024-06-20<!---->

whose content is recomputed from small expressions like
``today().format("YYYY-MM-DD")``. The package is split into an expression
evaluator (``expander.expressions``) and a marker scanner/patcher
(``expander.markers``), with file processing and a CLI on top.
"""

from __future__ import annotations

__version__ = "0.4.0"

__all__ = ["__version__"]
