"""
Identity - operator keys and disposable allocation identities.
"""
