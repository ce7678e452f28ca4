#!/usr/bin/env python3
"""
Analytics - request hit counters and reporting

This package is responsible for:
1. Anonymizing request metadata
2. Recording per-request counters in Redis
3. Building the analytics summary report
"""

__version__ = "1.0.0"
