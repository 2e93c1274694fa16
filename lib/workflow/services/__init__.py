"""
Services for the workflow package.
"""
