"""
Relational store: models, sessions and table loading.
"""
