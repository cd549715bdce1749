"""Fixed modelling assumptions - single source of truth.

These are deliberate simplifications of the investment model, not
tunable parameters. Changing any of them changes every projection.
"""

# Projection horizon, in years
HORIZON_YEARS = 15

# Annual return credited to the accumulated capital-expenditure reserve
# (reinvested in a broad equity index). Also used for the "invest the
# same cash in the index instead" comparison.
CAPEX_RESERVE_RETURN = 0.10

# Flat entity-level income tax rate for non pass-through ownership
ENTITY_TAX_RATE = 0.21

# Straight-line residential depreciation schedule
RESIDENTIAL_DEPRECIATION_YEARS = 27.5

MONTHS_PER_YEAR = 12

# Annual cash yield on net worth (%) that counts as the ROI break-even
ANNUAL_ROI_TARGET_PCT = 10.0
