#!/usr/bin/env python3
"""CLI tool to fetch card data from HearthstoneJSON and write a catalog file.

The output is the JSON card list read by ``JsonCardCatalog`` (point
``BGSIM_CARDS_PATH`` at it). Only Battlegrounds-relevant cards are kept:
minions and anomalies.
"""

import argparse
import json
import sys
from pathlib import Path

import httpx

API_BASE = "https://api.hearthstonejson.com/v1/latest"
DEFAULT_OUTPUT = Path(__file__).parent.parent / "data" / "cards.json"

KEPT_TYPES = {"MINION", "BATTLEGROUND_ANOMALY"}

# Mechanics copied onto the card as tags with value 1
KEYWORD_MECHANICS = {
    "TAUNT",
    "DIVINE_SHIELD",
    "REBORN",
    "POISONOUS",
    "VENOMOUS",
    "WINDFURY",
    "STEALTH",
}


def fetch_cards(locale: str) -> list[dict]:
    """Fetch every card for a locale.

    Args:
        locale: Locale code such as "enUS" or "deDE"

    Returns:
        List of HearthstoneJSON card dictionaries
    """
    print(f"  Fetching {locale} cards from HearthstoneJSON...")
    response = httpx.get(f"{API_BASE}/{locale}/cards.json", timeout=60.0, follow_redirects=True)
    response.raise_for_status()
    return response.json()


def transform_card(card: dict, localized_name: str | None = None) -> dict:
    """Transform a HearthstoneJSON card into the catalog format.

    Args:
        card: Card data in English
        localized_name: Name in the requested locale, if different

    Returns:
        Catalog card dictionary
    """
    mechanics = set(card.get("mechanics") or [])
    tags = {mechanic: 1 for mechanic in mechanics & KEYWORD_MECHANICS}
    if "MEGA_WINDFURY" in mechanics:
        tags["WINDFURY"] = 3
    if card.get("isBattlegroundsBuddy"):
        tags["BACON_BUDDY"] = 1

    transformed = {
        "id": card["id"],
        "name": card.get("name"),
        "type": card.get("type"),
        "set": card.get("set"),
        "races": card.get("races") or ([card["race"]] if card.get("race") else []),
        "attack": card.get("attack") or 0,
        "health": card.get("health") or 0,
        "tags": tags,
    }
    if card.get("techLevel"):
        transformed["techLevel"] = card["techLevel"]
    if card.get("isBattlegroundsPoolMinion"):
        transformed["isBattlegroundsPoolMinion"] = True
    if localized_name and localized_name != card.get("name"):
        transformed["localizedName"] = localized_name
    return transformed


def build_catalog(locale: str) -> list[dict]:
    """Fetch and transform the Battlegrounds-relevant cards."""
    cards = [card for card in fetch_cards("enUS") if card.get("type") in KEPT_TYPES]

    localized: dict[str, str] = {}
    if locale != "enUS":
        localized = {c["id"]: c.get("name") for c in fetch_cards(locale) if c.get("id")}

    return [transform_card(card, localized.get(card["id"])) for card in cards]


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Write a card catalog file from HearthstoneJSON")
    parser.add_argument(
        "--locale",
        default="enUS",
        help="Locale for display names (e.g. 'enUS', 'deDE')",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"Output file (default: {DEFAULT_OUTPUT})",
    )
    args = parser.parse_args()

    try:
        catalog = build_catalog(args.locale)
    except httpx.HTTPError as e:
        print(f"Fetch failed: {e}", file=sys.stderr)
        sys.exit(1)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump({"cards": catalog}, f, ensure_ascii=False)

    print(f"\nWrote {len(catalog)} cards to {args.output}")


if __name__ == "__main__":
    main()
