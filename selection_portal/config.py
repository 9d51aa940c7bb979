# env vars + constants
import logging
import os

PORTAL_TITLE = os.getenv("PORTAL_TITLE", "Problem Statement Portal")
PORT = int(os.getenv("PORT", "8000"))

OPTION_CAPACITY = int(os.getenv("OPTION_CAPACITY", "20"))
FEW_SLOTS_AT = int(os.getenv("FEW_SLOTS_AT", "15"))
MIN_NAME_LENGTH = 2

OPTION_NAMES = {
    "optionA": "Problem Statement A",
    "optionB": "Problem Statement B",
    "optionC": "Problem Statement C",
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
