"""User accounts (global, cross-organisation)"""
