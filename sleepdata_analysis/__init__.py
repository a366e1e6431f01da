"""
Single-chain sleep data analysis with a multilevel hidden Markov model.

Validates run parameters, fixes the dependent variable order, derives
hyperprior means and randomized initial values from summary statistics,
hands everything to an external mHMM sampler and persists one result
artifact per run.
"""
