"""
Newsarize Backend

Daily news reader that pulls RSS/Atom feeds and categorizes and
summarizes every article with a local language model.
"""

__version__ = "1.0.0"
