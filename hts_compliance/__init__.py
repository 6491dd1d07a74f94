"""
HTS Compliance Desk

Thin proxy backend for Section 232 derivative lookups. Reference material and
manual override rules are stored locally; classification is delegated to
Google Gemini.
"""

__version__ = "0.1.0"
