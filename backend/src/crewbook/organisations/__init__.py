"""Organisations (tenants) and organisation-scoped access guards"""
