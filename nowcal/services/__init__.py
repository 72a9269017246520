"""
Services - session persistence, the session/auth gateway and the
current-event resolver.
"""
