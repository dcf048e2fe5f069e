"""
HTTP service exposing the Audience Network adapter.
"""
