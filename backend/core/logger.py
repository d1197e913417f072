# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
termdeck logging.

Levels, handlers and format come from etc/logging.conf; the only value filled
in here is the rotating file handler's target, log/app.log under the checkout.
Every module logs through the same named logger:

    from core.logger import logger
"""

import configparser
import logging
import logging.config
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[2]
LOG_FILE = _ROOT / "log" / "app.log"
LOGGING_CONF = _ROOT / "etc" / "logging.conf"


def _load_config(conf_path: Path, log_file: Path) -> configparser.RawConfigParser:
    # Raw parser: the format strings carry %(asctime)s style fields.
    parser = configparser.RawConfigParser()
    parser.read_string(
        conf_path.read_text(encoding="utf-8").replace("%(log_file)s", str(log_file))
    )
    return parser


LOG_FILE.parent.mkdir(exist_ok=True)
logging.config.fileConfig(_load_config(LOGGING_CONF, LOG_FILE), disable_existing_loggers=False)

logger = logging.getLogger("termdeck")
