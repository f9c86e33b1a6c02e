"""Authentication: session tokens, password hashing, identity dependencies"""
