"""Cloud-init bootstrap payload for the VM."""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Union

from ca1_deploy.core.desired_state import DEFAULT_BOOTSTRAP_FILE
from ca1_deploy.core.exceptions import BootstrapFileMissingError

logger = logging.getLogger("ca1-deploy.bootstrap")


def load_custom_data(path: Union[str, Path] = DEFAULT_BOOTSTRAP_FILE) -> str:
    """
    Read the cloud-init file and encode it as VM custom data.

    Args:
        path: Bootstrap file, relative paths resolve against the working directory.

    Returns:
        Base64 of the file's UTF-8 text, as an ASCII string.

    Raises:
        BootstrapFileMissingError: If the file does not exist.
    """
    path = Path(path)
    if not path.is_file():
        raise BootstrapFileMissingError(f"Bootstrap file not found: {path}")

    text = path.read_text(encoding="utf-8")
    logger.info(f"Loaded bootstrap payload from {path} ({len(text)} chars)")
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
