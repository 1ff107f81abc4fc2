"""
HTTP service exposing the statement parser.
"""
