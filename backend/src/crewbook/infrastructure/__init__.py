"""Infrastructure adapters (object storage)"""
