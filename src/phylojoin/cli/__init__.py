"""
CLI commands for phylojoin.
"""
