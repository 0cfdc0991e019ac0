"""
Centralized path helpers for bundled data.
"""
from __future__ import annotations
from pathlib import Path

# This file lives at pokerun/core/paths.py
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
ASSETS = PACKAGE_ROOT / "assets"
POKEDEX_FILE = ASSETS / "pokedex.json"
SKILLS_FILE = ASSETS / "skills.json"
ITEMS_FILE = ASSETS / "items.json"
RUN_CONFIG_FILE = ASSETS / "run_config.json"
