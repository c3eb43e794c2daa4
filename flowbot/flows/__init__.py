"""
Flows Module
Conversation flow execution: engine, code sandbox, sessions, HTTP handlers.
"""
