"""
============================

Market Data Provider Adapters.

============================

This package contains client implementations for public market-data APIs.
Adapters translate provider-specific payloads into domain models and
implement the protocol interfaces defined in the protocols package.

"""
