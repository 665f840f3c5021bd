"""Core scanning logic: indicators, scoring rules and models.

This package contains pure logic with no I/O dependencies (no network
access). The ``app`` package wires it to the exchange gateway, the candle
cache and the scanners.
"""
