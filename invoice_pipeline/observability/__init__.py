"""
Logging and metrics instrumentation.
"""
