"""
Architecture Flow Simulator

Simulates request traffic through a software architecture diagram:
clients generate requests that are routed across servers, load balancers,
caches and databases, accruing latency, load and failures per tick.
"""

__version__ = "1.0.0"
