"""
rental_leverage_model.src - Self-financed vs bank-financed rental portfolio model

Projects, over 15 years, a portfolio bought with cash only against one
bought with a down payment and amortizing loans, under the same budget.

Modules:
    - core: Settings, logging, constants and exceptions
    - domain: Parameter/result models and pure calculators
    - application: Acquisition optimizer, simulation engine, summaries, sweeps, export
"""

__version__ = "1.0.0"
