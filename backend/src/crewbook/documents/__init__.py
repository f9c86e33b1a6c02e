"""Member documents: presigned uploads, verification and downloads"""
