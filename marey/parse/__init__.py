"""
Parsers for train line and topology documents.
"""
