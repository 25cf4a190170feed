"""
Backend for a Telegram mini-app task list.

Users sign in with Telegram Login Widget data, get a user document on first
login, and keep a per-user list of tasks they can add and complete.
"""
