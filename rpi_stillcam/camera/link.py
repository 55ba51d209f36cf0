"""Locate the file raspistill keeps overwriting with the newest timelapse frame."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

from .options import OptionTable
from .settings import LINK_LATEST_KEY


def resolve_link_path(options: OptionTable, save_dir: Union[str, Path]) -> Optional[Path]:
    """Absolute path of the link-latest file, or None when linking is off.

    Relative names are taken relative to ``save_dir``. Only the path is
    computed; the file is never touched.
    """
    tokens = options.tokens(LINK_LATEST_KEY)
    if not tokens or len(tokens) < 2:
        return None
    target = Path(os.path.expanduser(tokens[1]))
    if not target.is_absolute():
        target = Path(save_dir) / target
    return Path(os.path.abspath(target))


__all__ = ["resolve_link_path"]
