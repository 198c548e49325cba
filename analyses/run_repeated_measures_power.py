#!/usr/bin/env python3
"""
Repeated-Measures Power via SEM
===============================

Power of the test that k occasion means are equal, swept over the
correlation between occasions. The covariance matrix is unrestricted in
both models, so no sphericity assumption enters the ncp.

Parameters:
    n             - Sample size
    means         - Population means per occasion
    sd            - Common standard deviation
    correlations  - Between-occasion correlations to sweep
    alpha         - Significance level
    target_power  - Power to plan the sample size for
    method        - Sample-size method ('exact' or 'rule-of-thumb')

Outputs:
    - Power by correlation (CSV, PNG)
    - Text report (TXT)
"""

import sys
from pathlib import Path

# Hybrid import: works both when pip-installed and when run directly
try:
    from sem_power import config, data, designs, output, sem, stats, viz
except ImportError:
    sys.path.insert(0, str(Path(__file__).parent.parent))
    from sem_power import config, data, designs, output, sem, stats, viz

import warnings
warnings.filterwarnings('ignore')

import pandas as pd
import matplotlib.pyplot as plt

# =============================================================================
# PARAMETERS
# =============================================================================
DEFAULTS = {
    'n': config.DEFAULT_N,
    'means': [0.0, 0.25, 0.5],
    'sd': 1.0,
    'correlations': config.DEFAULT_CORRELATIONS,
    'alpha': config.DEFAULT_ALPHA,
    'target_power': config.DEFAULT_TARGET_POWER,
    'method': 'exact',
    'output_base': config.DEFAULT_OUTPUT_BASE,
}

TEST_NAME = 'rm-power'


# =============================================================================
# SWEEP
# =============================================================================
def sweep_correlations(params: dict) -> pd.DataFrame:
    """Fit the repeated-measures design once per correlation."""
    k = len(params['means'])
    variables = [f't{i+1}' for i in range(k)]
    design = designs.repeated_measures_design(variables)
    print(design.describe())

    rows = []
    for r in params['correlations']:
        cov = data.covariance_from_correlation(params['sd'], r, n_vars=k)
        sample = sem.summary_sample(design, params['means'], cov, params['n'])

        result = sem.run_design(design, sample, params['alpha'], params['target_power'],
                                method=params['method'])

        long_df = data.long_format(sample, variables)
        anova = stats.run_rm_anova(long_df, alpha=params['alpha'])
        lr = stats.lr_chi2_contrast(params['means'], cov, params['n'], stats.contrast_matrix(k))

        rows.append({
            'correlation': r,
            'ncp': result['ncp'],
            'lr_chi2': lr,
            'df': result['df'],
            'power': result['power'],
            'power_label': result['power_label'],
            'n_required': result['plan']['n_required'] if result['plan'] else None,
            'achieved_power': result['plan']['achieved_power'] if result['plan'] else None,
            'anova_f': anova['f_statistic'],
            'anova_p': anova['p_value'],
        })

    return pd.DataFrame(rows)


# =============================================================================
# PLOTTING FUNCTIONS
# =============================================================================
def plot_power_by_correlation(sweep_df, params, output_dir, test_name):
    """Power and required N against the between-occasion correlation."""
    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    colors = viz.get_colors()

    axes[0].plot(sweep_df['correlation'], sweep_df['power'], marker='o', color=colors['primary'])
    axes[0].axhline(params['target_power'], color=colors['target'], linestyle='--',
                    label=f"Target ({params['target_power']:.0%})")
    axes[0].set_xlabel('Correlation between occasions')
    axes[0].set_ylabel(f"Power at N = {params['n']}")
    axes[0].set_ylim(0, 1.02)
    axes[0].legend(loc='lower right')

    axes[1].bar(sweep_df['correlation'].astype(str), sweep_df['n_required'], color=colors['secondary'])
    axes[1].set_xlabel('Correlation between occasions')
    axes[1].set_ylabel(f"N for {params['target_power']:.0%} power")

    fig.suptitle(f"Repeated measures (k = {len(params['means'])}), means = {params['means']}")
    plt.tight_layout()
    output.save_figure(fig, output_dir, test_name, 'power-by-correlation')


# =============================================================================
# MAIN ANALYSIS
# =============================================================================
def run_analysis(params: dict) -> dict:
    """Run the repeated-measures power sweep."""
    print("=" * 70)
    print("REPEATED-MEASURES POWER VIA CONSTRAINED SEM")
    print("=" * 70)

    viz.setup_style()
    output_dir = output.get_output_dir(TEST_NAME, params['output_base'])

    sweep_df = sweep_correlations(params)
    output.save_csv(sweep_df, output_dir, TEST_NAME, 'results')

    print("\n" + "=" * 70)
    print("POWER BY CORRELATION")
    print("=" * 70)
    print(sweep_df.round(4).to_string(index=False))

    plot_power_by_correlation(sweep_df, params, output_dir, TEST_NAME)

    report = generate_report(sweep_df, params)
    output.save_report(report, output_dir, TEST_NAME)

    print("\n" + "=" * 70)
    print("ANALYSIS COMPLETE")
    print("=" * 70)
    output.print_summary(output_dir)

    return {
        'sweep': sweep_df,
        'output_dir': output_dir,
    }


def generate_report(sweep_df, params):
    """Generate text report."""
    lines = [
        "=" * 70,
        "REPEATED-MEASURES POWER REPORT",
        "=" * 70,
        "",
        "CONFIGURATION",
        "-" * 50,
        f"Occasion means: {params['means']}",
        f"SD: {params['sd']}",
        f"Sample size: {params['n']}",
        f"Alpha: {params['alpha']}",
        f"Target power: {params['target_power']} ({params['method']} sample-size method)",
        "",
        "RESULTS",
        "-" * 50,
    ]

    for _, row in sweep_df.iterrows():
        lines.append(
            f"  r={row['correlation']:.1f}: ncp={row['ncp']:.3f} (df={row['df']}), "
            f"power={row['power']:.3f} ({row['power_label']}), N for target={row['n_required']}"
        )

    lines.extend([
        "",
        "Higher correlation between occasions shrinks the variance of the",
        "differences, raising the ncp and lowering the N required.",
        "",
        "=" * 70,
    ])
    return "\n".join(lines)


# =============================================================================
# ENTRY POINT
# =============================================================================
if __name__ == '__main__':
    params = {**DEFAULTS}
    results = run_analysis(params)
