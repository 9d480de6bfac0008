"""
Knowledge base backend package.

This package provides a FastAPI application serving published articles,
categories and tags, plus a password-gated admin API. Each collection is
persisted as one JSON document in a pluggable key-value store.
"""
