"""
Financial core: aggregation, cash-flow projection, discounting, NPV/IRR/payback.

Import from the submodules directly; the package root ``feasibility``
re-exports the public surface.
"""
