"""
Output Module
=============

Dated output directories and consistent file names for power reports.

Naming Pattern: {DATE}-{TEST}-{SUFFIX}.{EXT}
Example: 2026-10-19-ttest-power-curve.png
"""

import json
from datetime import date
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from . import config


def get_output_dir(test_name: str, base: str = None, day: date = None) -> Path:
    """
    Create and return the dated directory {base}/{DATE}-{test_name}/.

    Parameters:
        test_name: Name of the analysis (lowercase-hyphen)
        base: Base output directory. Defaults to config.DEFAULT_OUTPUT_BASE
        day: Date stamp. Defaults to today

    Returns:
        Path to the created directory
    """
    if base is None:
        base = config.DEFAULT_OUTPUT_BASE
    if day is None:
        day = date.today()

    output_dir = Path(base) / f"{day.isoformat()}-{test_name}"
    output_dir.mkdir(parents=True, exist_ok=True)

    print(f"Output directory: {output_dir}")
    return output_dir


def output_path(output_dir: Path, test_name: str, suffix: str, ext: str, day: date = None) -> Path:
    """Dated file path inside output_dir."""
    if day is None:
        day = date.today()
    return Path(output_dir) / f"{day.isoformat()}-{test_name}-{suffix}.{ext}"


def save_csv(
    df: pd.DataFrame,
    output_dir: Path,
    test_name: str,
    suffix: str,
    index: bool = False
) -> Path:
    """Save a results table as CSV."""
    filepath = output_path(output_dir, test_name, suffix, 'csv')
    df.to_csv(filepath, index=index)
    print(f"Saved: {filepath}")
    return filepath


def save_json(payload: dict, output_dir: Path, test_name: str, suffix: str) -> Path:
    """Save run parameters or scalar results as JSON."""
    filepath = output_path(output_dir, test_name, suffix, 'json')
    with open(filepath, 'w') as f:
        json.dump(payload, f, indent=2, default=str)
    print(f"Saved: {filepath}")
    return filepath


def save_figure(
    fig: plt.Figure,
    output_dir: Path,
    test_name: str,
    suffix: str,
    dpi: int = None
) -> Path:
    """Save and close a matplotlib figure. dpi defaults to config.DEFAULT_DPI."""
    if dpi is None:
        dpi = config.DEFAULT_DPI

    filepath = output_path(output_dir, test_name, suffix, 'png')
    fig.savefig(filepath, dpi=dpi, bbox_inches='tight', facecolor='white')
    plt.close(fig)
    print(f"Saved: {filepath}")
    return filepath


def save_report(text: str, output_dir: Path, test_name: str, suffix: str = 'report') -> Path:
    """Save a plain-text report."""
    filepath = output_path(output_dir, test_name, suffix, 'txt')
    filepath.write_text(text)
    print(f"Saved: {filepath}")
    return filepath


def print_summary(output_dir: Path) -> list[str]:
    """Print and return the files generated in output_dir."""
    output_dir = Path(output_dir)
    files = sorted(p.name for p in output_dir.iterdir()) if output_dir.exists() else []

    if files:
        print(f"\nFiles generated in {output_dir}:")
        for name in files:
            print(f"  - {name}")
    else:
        print(f"\nNo files generated in {output_dir}")
    return files
