"""
config.py - runtime settings read from environment variables

app.py copies Streamlit secrets into the environment before anything here is
read, so the same variables work locally (shell/.env) and on Streamlit Cloud.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

# location of the JSON storage file (relative to the package)
_default_data_file = os.path.join(os.path.dirname(__file__), "..", "data", "finansmart.json")

# fixed storage keys; the "_v2" suffix is the only schema marker
DATA_KEY = "finansmart_data_v2"
SHEET_URL_KEY = "sheet_url"

# cards shown when FINANSMART_CARDS is not set
DEFAULT_CARDS = [
    "BaneseCard",
    "Nubank Davi",
    "Torra",
    "Iti Tuy",
]


def _parse_cards(raw: str) -> List[str]:
    cards = []
    for name in raw.split(","):
        name = name.strip()
        if name and name not in cards:
            cards.append(name)
    return cards


def _parse_timeout(raw: str) -> Optional[float]:
    raw = raw.strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass
class Settings:
    data_file: str = _default_data_file
    sheet_url: str = ""
    card_names: List[str] = field(default_factory=lambda: list(DEFAULT_CARDS))
    sync_timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from FINANSMART_* variables, falling back to defaults."""
        data_file = (os.getenv("FINANSMART_DATA_FILE") or "").strip() or _default_data_file
        cards = _parse_cards(os.getenv("FINANSMART_CARDS") or "") or list(DEFAULT_CARDS)
        return cls(
            data_file=data_file,
            sheet_url=(os.getenv("FINANSMART_SHEET_URL") or "").strip(),
            card_names=cards,
            sync_timeout=_parse_timeout(os.getenv("FINANSMART_SYNC_TIMEOUT") or ""),
        )
