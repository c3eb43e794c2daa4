"""
Bots Module
Bot records, conversation flow authoring and chat histories.
"""
