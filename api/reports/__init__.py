"""
Device history report e-mails.
"""
