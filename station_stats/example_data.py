"""
Example datasets for the Station Statistics Reporter.

Two small demonstration sets:

- **weather**: three Oyo State weather stations with four daily
  temperature readings each (°C).
- **rainfall**: daily rainfall (mm) for five Nigerian states, one
  reading per weather station, labelled with the state's region.

``generate_example_csv`` writes either set as a CSV file the loader
accepts.
"""

import csv
import os

from .data_model import Dataset

WEATHER_READINGS = {
    'Station 1': (22.5, 23.1, 24.0, 23.2),
    'Station 2': (20.5, 21.0, 22.0, 21.5),
    'Station 3': (25.0, 26.0, 27.0, 26.5),
}

RAINFALL_READINGS = {
    'Lagos': (12, 15, 9, 14),
    'Rivers': (18, 20, 22, 19),
    'Bayelsa': (22, 20, 21, 23),
    'Kano': (3, 4, 2, 5),
    'Enugu': (11, 12, 10, 13),
}

# ── Nigerian state → region map ──────────────────────────────────────────
UNKNOWN_REGION = "Unknown Region"

_REGION_STATES = {
    "Southern Region": (
        "Lagos", "Rivers", "Bayelsa", "Delta", "Edo", "Cross River",
        "Akwa Ibom", "Calabar",
    ),
    "Eastern Region": ("Enugu", "Ebonyi", "Anambra", "Imo", "Abia"),
    "South-Western Region": ("Oyo", "Ogun", "Ondo", "Osun", "Ekiti"),
    "Central Region": (
        "Kaduna", "Kogi", "Kwara", "Nasarawa", "Niger", "Plateau", "Benue",
    ),
    "Northern Region": (
        "Kano", "Katsina", "Jigawa", "Kebbi", "Sokoto", "Zamfara",
    ),
    "North-Eastern Region": ("Borno", "Yobe", "Adamawa", "Gombe", "Taraba"),
    "Federal Capital Territory": ("FCT",),
}

NIGERIA_REGIONS = {
    state: region
    for region, states in _REGION_STATES.items()
    for state in states
}


def region_for(state: str) -> str:
    """Region label of a Nigerian state, ``"Unknown Region"`` if unmapped."""
    return NIGERIA_REGIONS.get(state.strip(), UNKNOWN_REGION)


def weather_dataset() -> Dataset:
    return Dataset.from_mapping(
        WEATHER_READINGS,
        labels={name: "Oyo" for name in WEATHER_READINGS},
    )


def rainfall_dataset() -> Dataset:
    return Dataset.from_mapping(
        RAINFALL_READINGS,
        labels={state: region_for(state) for state in RAINFALL_READINGS},
    )


EXAMPLES = {
    'weather': weather_dataset,
    'rainfall': rainfall_dataset,
}


def load_example(name: str) -> Dataset:
    try:
        return EXAMPLES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown example {name!r}; choose from {', '.join(sorted(EXAMPLES))}."
        ) from None


def generate_example_csv(output_dir: str, name: str = 'rainfall') -> str:
    """Write example *name* as ``<name>.csv`` in *output_dir*.

    Returns
    -------
    str
        Path of the written file.
    """
    dataset = load_example(name)
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, f"{name}.csv")

    width = max(len(r) for r in dataset.groups.values())
    with open(path, 'w', newline='', encoding='utf-8') as fh:
        writer = csv.writer(fh)
        writer.writerow(
            ["Group", "Label"] + [f"Reading {i}" for i in range(1, width + 1)]
        )
        for group, readings in dataset.groups.items():
            cells = [f"{v:g}" for v in readings]
            cells += [""] * (width - len(cells))
            writer.writerow([group, dataset.label_of(group)] + cells)
    return path
