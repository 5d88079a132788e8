"""
Architecture Flow Simulator API
"""
