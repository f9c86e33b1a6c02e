"""Security tests for Crewbook

This module contains security-focused tests including:
- Tenant escape/isolation attacks
- Authentication bypass attempts
- Injection through slugs, filters and identifiers
"""
