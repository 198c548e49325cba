"""
Global Configuration for SEM Power Analysis
============================================

Central location for default parameters used across the power calculator
and the analysis scripts. Override these in individual scripts as needed.
"""

# =============================================================================
# POWER CONFIGURATION
# =============================================================================
DEFAULT_ALPHA = 0.05
DEFAULT_TARGET_POWER = 0.8

# Rule of thumb: ncp needed for 80% power ~ chi-square quantile at p=0.995
RULE_OF_THUMB_QUANTILE = 0.995
RULE_OF_THUMB_POWER = 0.8

# Power values are compared against the target with this tolerance
POWER_TOLERANCE = 1e-9

# Upper bound when searching for the ncp that reaches a target power
MAX_NCP_SEARCH = 1e6

# =============================================================================
# SEM CONFIGURATION
# =============================================================================
DEFAULT_OBJECTIVE = 'MLW'
DEFAULT_SOLVER = 'SLSQP'

# Seed used when building exact-moment samples from summary statistics
DEFAULT_SEED = 2024

# =============================================================================
# TUTORIAL SCENARIOS
# =============================================================================
DEFAULT_N = 30
DEFAULT_EFFECT_SIZE = 0.5
DEFAULT_CORRELATIONS = [0.0, 0.2, 0.4, 0.6, 0.8]
DEFAULT_SAMPLE_SIZES = list(range(10, 201, 10))

# =============================================================================
# OUTPUT CONFIGURATION
# =============================================================================
DEFAULT_OUTPUT_BASE = 'outputs'
DEFAULT_DPI = 150

# =============================================================================
# POWER INTERPRETATION LABELS
# =============================================================================
POWER_THRESHOLDS = {
    0.95: "Very high",
    0.8: "Adequate",
    0.5: "Low",
    0.0: "Very low",
}


def get_power_label(power_value: float) -> str:
    """Return human-readable power interpretation."""
    for threshold, label in sorted(POWER_THRESHOLDS.items(), reverse=True):
        if power_value >= threshold:
            return label
    return "Very low"
