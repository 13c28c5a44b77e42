"""
Core infrastructure: database, security, errors, logging and metrics
"""
