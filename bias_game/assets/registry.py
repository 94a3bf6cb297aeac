from __future__ import annotations

import csv
import re
from dataclasses import dataclass
from pathlib import Path

from bias_game.api.models import Category, Stimulus
from bias_game.config import settings


def _norm_key(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip().casefold()


class AssetLoadError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class StimulusSet:
    """Seed stimuli in file order; labels are unique (case/whitespace-insensitive)."""

    stimuli: tuple[Stimulus, ...]

    @staticmethod
    def from_rows(rows: list[Stimulus]) -> "StimulusSet":
        seen: set[str] = set()
        for s in rows:
            key = _norm_key(s.label)
            if key in seen:
                raise AssetLoadError(f"Duplicate stimulus label: {s.label}")
            seen.add(key)
        return StimulusSet(stimuli=tuple(rows))


@dataclass(frozen=True, slots=True)
class GameAssets:
    stimuli: StimulusSet

    def seed_stimuli(self) -> list[Stimulus]:
        return list(self.stimuli.stimuli)


def _read_csv_rows(path: Path) -> list[list[str]]:
    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            rows = [[c.strip() for c in row if c is not None] for row in csv.reader(f)]
    except FileNotFoundError as e:
        raise AssetLoadError(f"Asset file not found: {path}") from e

    return [row for row in rows if any(cell.strip() for cell in row)]


def load_stimuli_csv(path: Path) -> StimulusSet:
    rows = _read_csv_rows(path)
    if not rows:
        raise AssetLoadError(f"Empty stimuli CSV: {path}")

    header = [c.casefold() for c in rows[0]]
    if header[:2] != ["label", "category"]:
        raise AssetLoadError(f"Unexpected header in {path}: {rows[0]}")

    out: list[Stimulus] = []
    for row in rows[1:]:
        if len(row) < 2:
            continue
        label, category = row[0].strip(), row[1].strip().casefold()
        if not label:
            continue
        try:
            out.append(Stimulus(label=label, correct_category=Category(category)))
        except ValueError as e:
            raise AssetLoadError(f"Invalid category for '{label}' in {path}: {row[1]}") from e

    if not out:
        raise AssetLoadError(f"No stimuli in {path}")
    return StimulusSet.from_rows(out)


def _fallback_game_assets() -> GameAssets:
    """Built-in seed set used when `assets/stimuli.csv` is missing."""

    rows = [
        Stimulus(label="Apple", correct_category=Category.left),
        Stimulus(label="Banana", correct_category=Category.right),
        Stimulus(label="Dog", correct_category=Category.right),
        Stimulus(label="Car", correct_category=Category.left),
    ]
    return GameAssets(stimuli=StimulusSet.from_rows(rows))


def load_game_assets(*, root: Path) -> GameAssets:
    # Fall back to the built-in set when the CSV is missing or broken.
    # Set BIAS_GAME_STRICT_ASSETS=1 to surface load errors instead.
    try:
        return GameAssets(stimuli=load_stimuli_csv(root / "assets" / "stimuli.csv"))
    except AssetLoadError:
        if settings.strict_assets:
            raise
        return _fallback_game_assets()
