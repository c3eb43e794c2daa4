"""
FlowBot
Multi-tenant chatbot platform with authored conversation flows.
"""
