# src/cart_promotions/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[2]  # repository root in a source checkout


def _dotenv_path() -> str:
    # Installed wheels have no repo root; search from the working directory
    checkout_env = ROOT_DIR / ".env"
    if checkout_env.is_file():
        return str(checkout_env)
    return find_dotenv(usecwd=True)


DOTENV_PATH = _dotenv_path()
if DOTENV_PATH:
    load_dotenv(dotenv_path=DOTENV_PATH)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int | None = None) -> int | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


@dataclass(frozen=True)
class Settings:
    decimals: int
    currency_symbol: str
    log_level: str


def load_settings() -> Settings:
    decimals = _get_int("CART_DECIMALS", "DECIMALS", default=2)
    if decimals is None or decimals < 0:
        raise ValueError("CART_DECIMALS must be a non-negative integer")
    return Settings(
        decimals=decimals,
        currency_symbol=_get_env("CURRENCY_SYMBOL", default="$") or "$",
        log_level=(_get_env("CART_LOG_LEVEL", "LOG_LEVEL", default="INFO") or "INFO").upper(),
    )


settings = load_settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or settings.log_level,
        format=LOG_FORMAT,
    )
