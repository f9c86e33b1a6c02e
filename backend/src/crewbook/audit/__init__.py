"""Audit trail: append-only record of security and compliance events"""
