"""Organisation members: tenant-scoped person records"""
