"""
EventHub ticketing service
"""
