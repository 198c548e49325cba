"""
Visualization Module
====================

Plot style and power-curve helpers. Analysis scripts compose these into
their own figures.
"""

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving plots

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from . import config


def setup_style() -> None:
    """Configure seaborn whitegrid style with consistent font sizes."""
    sns.set_theme(style='whitegrid')
    plt.rcParams.update({
        'figure.figsize': (10, 6),
        'font.size': 10,
        'axes.titlesize': 12,
        'axes.labelsize': 11,
        'legend.fontsize': 10,
    })


def get_colors() -> dict:
    """Named colors shared by all power plots."""
    return {
        'primary': '#3498db',      # Blue
        'secondary': '#2ecc71',    # Green
        'accent': '#e74c3c',       # Red
        'neutral': '#95a5a6',      # Gray
        'target': '#f39c12',       # Orange
        'adequate': '#2ecc71',     # Green (power >= target)
        'inadequate': '#95a5a6',   # Gray
    }


def plot_power_curve(
    curve: pd.DataFrame,
    ax: plt.Axes = None,
    hue: str = None,
    target_power: float = None,
    alpha: float = None,
    title: str = None
) -> plt.Axes:
    """
    Plot power against sample size.

    Parameters:
        curve: DataFrame with 'n' and 'power' columns (see power.power_curve)
        ax: Axes to draw on. A new figure is created when None
        hue: Optional column separating several curves
        target_power: Horizontal reference line. Defaults to config.DEFAULT_TARGET_POWER
        alpha: Optional horizontal line at the significance level
        title: Axes title

    Returns:
        The axes drawn on
    """
    if target_power is None:
        target_power = config.DEFAULT_TARGET_POWER
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 6))

    colors = get_colors()
    sns.lineplot(data=curve, x='n', y='power', hue=hue, marker='o', ax=ax,
                 color=None if hue else colors['primary'])

    ax.axhline(target_power, color=colors['target'], linestyle='--',
               label=f'Target ({target_power:.0%})')
    if alpha is not None:
        ax.axhline(alpha, color=colors['neutral'], linestyle=':', label=f'alpha ({alpha})')

    ax.set_ylim(0, 1.02)
    ax.set_xlabel('Sample size (N)')
    ax.set_ylabel('Power')
    if title:
        ax.set_title(title)
    ax.legend(loc='lower right')
    return ax


def plot_power_bars(results: pd.DataFrame, label_col: str, ax: plt.Axes = None,
                    target_power: float = None) -> plt.Axes:
    """Horizontal bars of power per design or scenario, colored by adequacy."""
    if target_power is None:
        target_power = config.DEFAULT_TARGET_POWER
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 6))

    colors = get_colors()
    bar_colors = [colors['adequate'] if p >= target_power else colors['inadequate']
                  for p in results['power']]
    bars = ax.barh(results[label_col].astype(str), results['power'], color=bar_colors)
    ax.axvline(target_power, color=colors['target'], linestyle='--')

    for bar, value in zip(bars, results['power']):
        ax.text(min(value + 0.01, 0.95), bar.get_y() + bar.get_height() / 2,
                f'{value:.2f}', va='center', fontsize=9)

    ax.set_xlim(0, 1)
    ax.set_xlabel('Power')
    return ax
