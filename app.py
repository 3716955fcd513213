"""
app.py - minimal entrypoint for Streamlit app

Keep this file tiny so streamlit can import it without side-effects.
Run the app with:
    streamlit run app.py

This module simply delegates to finansmart.ui.dashboard.main().

"""
import os

import streamlit as _st

# If running on Streamlit Cloud, transfer secrets to env vars so the settings can read them
try:
    _secrets = dict(_st.secrets)
except FileNotFoundError:
    # no secrets.toml locally
    _secrets = {}
for _k in ("FINANSMART_DATA_FILE", "FINANSMART_SHEET_URL", "FINANSMART_CARDS", "FINANSMART_SYNC_TIMEOUT"):
    if _k in _secrets and _secrets[_k] and _k not in os.environ:
        os.environ[_k] = str(_secrets[_k])

from finansmart.ui import dashboard  # noqa: E402


def main():
    dashboard.main()


if __name__ == "__main__":
    main()
