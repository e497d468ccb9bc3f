"""
Pulse event ingestion
"""
