# accounts/__init__.py
"""
Accounts app - users, roles and authorization for Gradlink.

This app provides:
- User: email-login user bound to an institution (Tenant)
- Role / Permission: declarative role -> permission mapping
- ActorContext: authorization context resolved per request
"""
