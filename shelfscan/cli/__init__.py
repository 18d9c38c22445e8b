"""Unified command-line interface for shelfscan.

Usage:
    shelfscan parse <ocr.json> [--json] [--catalog FILE]
    shelfscan scan <image> [--ocr-url URL] [--previews] [--json]
    shelfscan stores
"""
