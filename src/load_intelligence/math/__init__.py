"""Numerical helpers: strength arithmetic, workload ratios, recovery curves, regression."""
